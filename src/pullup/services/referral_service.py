# src/pullup/services/referral_service.py

"""Referral codes and the raffle ticket ledger.

A referral moves through three states:
1. A referee redeems a referrer's code -> referrer total and pending +1
2. The referee completes the qualifying action -> pending -1, tickets +1
3. Nothing further; a referee can only ever redeem one code
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pullup import config, identity
from pullup.db import models
from pullup.exceptions import (
    ReferralCodeNotFoundError,
    ReferralConflictError,
    StorageError,
)
from pullup.schemas.referral import TicketStats

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_MAX_CODE_ATTEMPTS = 5


def normalize_code(code: str) -> str:
    """Codes are case-insensitive; store and compare them upper-cased."""
    return code.strip().upper()


def generate_code(length: int | None = None) -> str:
    """A random referral code of uppercase letters and digits."""
    length = length or config.REFERRAL_CODE_LENGTH
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


async def _find_code_for_player(
    db: AsyncSession, player_id: str
) -> models.ReferralCode | None:
    result = await db.execute(
        select(models.ReferralCode).where(models.ReferralCode.player_id == player_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_referral_code(
    db: AsyncSession, player_id: str
) -> models.ReferralCode:
    """
    Returns the player's referral code, issuing one on first request.

    A unique-constraint failure means either another request issued this
    player's code first (return that one) or the random code collided with
    someone else's (try a fresh code).

    Raises:
        StorageError: If no unique code could be allocated
    """
    existing = await _find_code_for_player(db, player_id)
    if existing is not None:
        return existing

    for attempt in range(1, _MAX_CODE_ATTEMPTS + 1):
        code_row = models.ReferralCode(player_id=player_id, code=generate_code())
        db.add(code_row)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            existing = await _find_code_for_player(db, player_id)
            if existing is not None:
                return existing
            logger.debug(
                "Referral code collision, retrying",
                extra={"player_id": player_id, "attempt": attempt},
            )
            continue

        logger.info(
            "Issued referral code",
            extra={"player_id": player_id, "code": code_row.code},
        )
        return code_row

    raise StorageError(
        "get_or_create_referral_code",
        f"no unique code after {_MAX_CODE_ATTEMPTS} attempts",
    )


async def resolve_referral_code(db: AsyncSession, code: str) -> models.ReferralCode:
    """
    Looks up the referrer behind a code.

    Raises:
        ReferralCodeNotFoundError: If the code is unknown
    """
    normalized = normalize_code(code)
    result = await db.execute(
        select(models.ReferralCode).where(models.ReferralCode.code == normalized)
    )
    code_row = result.scalar_one_or_none()
    if code_row is None:
        raise ReferralCodeNotFoundError(normalized)
    return code_row


async def _ensure_ticket_row(db: AsyncSession, player_id: str) -> None:
    """Create the referrer's zeroed ticket row if it doesn't exist yet."""
    found = await db.execute(
        select(models.RaffleTickets.player_id).where(
            models.RaffleTickets.player_id == player_id
        )
    )
    if found.scalar_one_or_none() is not None:
        return
    try:
        async with db.begin_nested():
            db.add(
                models.RaffleTickets(
                    player_id=player_id,
                    tickets=0,
                    total_referrals=0,
                    pending_referrals=0,
                )
            )
    except IntegrityError:
        logger.debug(
            "Ticket row created concurrently",
            extra={"player_id": player_id},
        )


async def register_referral(
    db: AsyncSession, referee_id: str, code: str, used_google: bool
) -> bool:
    """
    Redeems a referral code for a newly signed-up referee.

    Returns False, changing nothing, when the referee is a guest session,
    the signup was not verified, the code is unknown, the referee owns the
    code, or the referee has already redeemed a code.

    Raises:
        ReferralConflictError: If a redemption for this referee committed
            concurrently (retrying will return False)
        StorageError: If the database fails or aborts the transaction
    """
    normalized = normalize_code(code)
    log_extra = {"referee_id": referee_id, "code": normalized}

    if identity.is_guest_identifier(referee_id):
        logger.info("Referral ignored for guest referee", extra=log_extra)
        return False
    if not used_google:
        logger.info("Referral ignored for unverified signup", extra=log_extra)
        return False

    try:
        code_row = await resolve_referral_code(db, normalized)
    except ReferralCodeNotFoundError:
        logger.info("Referral ignored for unknown code", extra=log_extra)
        return False

    referrer_id = code_row.player_id
    if referrer_id == referee_id:
        logger.info("Referral ignored for self-referral", extra=log_extra)
        return False

    existing = await db.execute(
        select(models.Referral.id).where(models.Referral.referee_id == referee_id)
    )
    if existing.scalar_one_or_none() is not None:
        logger.info("Referral ignored, referee already redeemed", extra=log_extra)
        return False

    try:
        db.add(
            models.Referral(
                referrer_id=referrer_id, referee_id=referee_id, code=normalized
            )
        )
        await db.flush()

        await _ensure_ticket_row(db, referrer_id)
        await db.execute(
            update(models.RaffleTickets)
            .where(models.RaffleTickets.player_id == referrer_id)
            .values(
                total_referrals=models.RaffleTickets.total_referrals + 1,
                pending_referrals=models.RaffleTickets.pending_referrals + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    except IntegrityError as e:
        logger.warning("Concurrent referral redemption", extra=log_extra)
        await db.rollback()
        raise ReferralConflictError(referee_id) from e

    except SQLAlchemyError as e:
        logger.error(
            "Failed to register referral",
            extra={**log_extra, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise StorageError("register_referral", str(e)) from e

    logger.info(
        "Referral registered",
        extra={**log_extra, "referrer_id": referrer_id},
    )
    return True


async def qualify_referral(db: AsyncSession, referee_id: str) -> bool:
    """
    Credits the referrer once the referee completes the qualifying action.

    Moves one unit from the referrer's pending_referrals to tickets. The
    referral row is stamped with a conditional UPDATE (only while
    qualified_at is still NULL), so however many times or however
    concurrently this is called for a referee, only one call credits a ticket.

    Returns:
        True if this call credited the ticket, False if there is no referral
        for the referee or it was already qualified

    Raises:
        StorageError: If the database fails or aborts the transaction
    """
    log_extra = {"referee_id": referee_id}
    try:
        result = await db.execute(
            select(models.Referral.referrer_id).where(
                models.Referral.referee_id == referee_id,
                models.Referral.qualified_at.is_(None),
            )
        )
        referrer_id = result.scalar_one_or_none()
        if referrer_id is None:
            logger.info("No pending referral to qualify", extra=log_extra)
            return False

        stamped = await db.execute(
            update(models.Referral)
            .where(
                models.Referral.referee_id == referee_id,
                models.Referral.qualified_at.is_(None),
            )
            .values(qualified_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if stamped.rowcount != 1:
            # Another call qualified this referee between our read and update
            await db.rollback()
            logger.info("Referral already qualified", extra=log_extra)
            return False

        await db.execute(
            update(models.RaffleTickets)
            .where(models.RaffleTickets.player_id == referrer_id)
            .values(
                pending_referrals=models.RaffleTickets.pending_referrals - 1,
                tickets=models.RaffleTickets.tickets + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    except SQLAlchemyError as e:
        logger.error(
            "Failed to qualify referral",
            extra={**log_extra, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise StorageError("qualify_referral", str(e)) from e

    logger.info(
        "Referral qualified, ticket credited",
        extra={**log_extra, "referrer_id": referrer_id},
    )
    return True


async def get_ticket_stats(db: AsyncSession, player_id: str) -> TicketStats:
    """A referrer's ticket tallies; all zeros if they have never referred anyone."""
    result = await db.execute(
        select(models.RaffleTickets)
        .where(models.RaffleTickets.player_id == player_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        return TicketStats(player_id=player_id)
    return TicketStats.model_validate(row)
