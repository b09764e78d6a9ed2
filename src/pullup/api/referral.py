# src/pullup/api/referral.py

"""API endpoints for referral codes and raffle tickets."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pullup.db.models import ReferralCode
from pullup.db.session import get_db
from pullup.schemas import referral as referral_schema
from pullup.services import referral_service

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.post(
    "/codes/{player_id}",
    response_model=referral_schema.ReferralCodeRead,
    status_code=status.HTTP_200_OK,
)
async def issue_referral_code(
    player_id: str, db: AsyncSession = Depends(get_db)
) -> ReferralCode:
    """Return the player's referral code, issuing one on first request."""
    return await referral_service.get_or_create_referral_code(db, player_id)


@router.get("/codes/lookup/{code}", response_model=referral_schema.ReferralCodeRead)
async def lookup_referral_code(
    code: str, db: AsyncSession = Depends(get_db)
) -> ReferralCode:
    """
    Resolve a code (case-insensitive) to its referrer.

    Raises:
        404: If the code is unknown
    """
    return await referral_service.resolve_referral_code(db, code)


@router.post("/", response_model=referral_schema.ReferralRegisterResult)
async def register_referral(
    referral_in: referral_schema.ReferralRegister, db: AsyncSession = Depends(get_db)
) -> referral_schema.ReferralRegisterResult:
    """
    Redeem a referral code for a newly signed-up player.

    `registered` is false when nothing changed: unknown code, self-referral,
    a referee who already redeemed a code, a guest account, or an
    unverified signup.

    Raises:
        409: If a redemption for this referee raced this one
    """
    registered = await referral_service.register_referral(
        db, referral_in.referee_id, referral_in.code, referral_in.used_google
    )
    return referral_schema.ReferralRegisterResult(registered=registered)


@router.post(
    "/{referee_id}/qualify", response_model=referral_schema.ReferralQualifyResult
)
async def qualify_referral(
    referee_id: str, db: AsyncSession = Depends(get_db)
) -> referral_schema.ReferralQualifyResult:
    """
    Mark the referee's qualifying action as done, crediting the referrer a ticket.

    Only the first call for a referee credits anything.
    """
    qualified = await referral_service.qualify_referral(db, referee_id)
    return referral_schema.ReferralQualifyResult(qualified=qualified)


@router.get("/{player_id}/tickets", response_model=referral_schema.TicketStats)
async def read_ticket_stats(
    player_id: str, db: AsyncSession = Depends(get_db)
) -> referral_schema.TicketStats:
    """Ticket tallies for a referrer (zeros if they have never referred anyone)."""
    return await referral_service.get_ticket_stats(db, player_id)
