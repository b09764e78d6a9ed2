# tests/test_referrals.py

"""Tests for referral codes and raffle ticket accounting."""

import pytest
from pullup import config
from pullup.exceptions import ReferralCodeNotFoundError
from pullup.services import referral_service
from sqlalchemy.ext.asyncio import AsyncSession

# =============================================================================
# Helper Functions
# =============================================================================


async def code_for(db: AsyncSession, player_id: str) -> str:
    return (await referral_service.get_or_create_referral_code(db, player_id)).code


async def tickets(db: AsyncSession, player_id: str) -> tuple[int, int, int]:
    stats = await referral_service.get_ticket_stats(db, player_id)
    return stats.tickets, stats.total_referrals, stats.pending_referrals


# =============================================================================
# Referral Codes
# =============================================================================


def test_generated_codes_are_uppercase_alphanumeric():
    code = referral_service.generate_code()
    assert len(code) == config.REFERRAL_CODE_LENGTH
    assert code.isalnum()
    assert code == code.upper()


@pytest.mark.asyncio
async def test_player_keeps_one_code(db_session: AsyncSession):
    first = await code_for(db_session, "alice")
    second = await code_for(db_session, "alice")
    other = await code_for(db_session, "bob")

    assert first == second
    assert other != first


@pytest.mark.asyncio
async def test_resolve_code_is_case_insensitive(db_session: AsyncSession):
    code = await code_for(db_session, "alice")

    resolved = await referral_service.resolve_referral_code(db_session, code.lower())

    assert resolved.player_id == "alice"


@pytest.mark.asyncio
async def test_resolve_unknown_code(db_session: AsyncSession):
    with pytest.raises(ReferralCodeNotFoundError):
        await referral_service.resolve_referral_code(db_session, "NOPE1234")


# =============================================================================
# Redemption and Qualification
# =============================================================================


@pytest.mark.asyncio
async def test_redeem_then_qualify_moves_pending_to_tickets(db_session: AsyncSession):
    """
    A redeemed code adds a pending referral; the referee's qualifying action
    turns it into exactly one ticket without touching total_referrals.
    """
    # 1. ARRANGE
    code = await code_for(db_session, "alice")
    assert await tickets(db_session, "alice") == (0, 0, 0)

    # 2. ACT: bob signs up with alice's code.
    registered = await referral_service.register_referral(
        db_session, "bob", code, used_google=True
    )

    # 3. ASSERT
    assert registered is True
    assert await tickets(db_session, "alice") == (0, 1, 1)

    # 2. ACT: bob completes the qualifying action.
    qualified = await referral_service.qualify_referral(db_session, "bob")

    # 3. ASSERT: pending back to its pre-redemption value, one ticket earned.
    assert qualified is True
    assert await tickets(db_session, "alice") == (1, 1, 0)


@pytest.mark.asyncio
async def test_qualify_is_exactly_once(db_session: AsyncSession):
    code = await code_for(db_session, "alice")
    await referral_service.register_referral(db_session, "bob", code, used_google=True)

    assert await referral_service.qualify_referral(db_session, "bob") is True
    assert await referral_service.qualify_referral(db_session, "bob") is False
    assert await tickets(db_session, "alice") == (1, 1, 0)


@pytest.mark.asyncio
async def test_qualify_without_referral_is_noop(db_session: AsyncSession):
    assert await referral_service.qualify_referral(db_session, "stranger") is False


@pytest.mark.asyncio
async def test_referrer_accumulates_many_referees(db_session: AsyncSession):
    code = await code_for(db_session, "alice")
    for referee in ("bob", "carol", "dave"):
        assert await referral_service.register_referral(
            db_session, referee, code, used_google=True
        )
    await referral_service.qualify_referral(db_session, "carol")

    assert await tickets(db_session, "alice") == (1, 3, 2)


@pytest.mark.asyncio
async def test_referee_can_only_redeem_once(db_session: AsyncSession):
    # 1. ARRANGE: bob already redeemed alice's code.
    alice_code = await code_for(db_session, "alice")
    carol_code = await code_for(db_session, "carol")
    await referral_service.register_referral(
        db_session, "bob", alice_code, used_google=True
    )

    # 2. ACT: bob tries the same code again, then someone else's.
    again = await referral_service.register_referral(
        db_session, "bob", alice_code, used_google=True
    )
    other = await referral_service.register_referral(
        db_session, "bob", carol_code, used_google=True
    )

    # 3. ASSERT
    assert again is False
    assert other is False
    assert await tickets(db_session, "alice") == (0, 1, 1)
    assert await tickets(db_session, "carol") == (0, 0, 0)


@pytest.mark.asyncio
async def test_ignored_redemptions_change_nothing(db_session: AsyncSession):
    code = await code_for(db_session, "alice")

    assert (
        await referral_service.register_referral(
            db_session, "alice", code, used_google=True
        )
        is False
    )
    assert (
        await referral_service.register_referral(
            db_session, "bob", "UNKNOWN1", used_google=True
        )
        is False
    )
    assert (
        await referral_service.register_referral(
            db_session, "guest_9c2e", code, used_google=True
        )
        is False
    )
    assert (
        await referral_service.register_referral(
            db_session, "bob", code, used_google=False
        )
        is False
    )

    assert await tickets(db_session, "alice") == (0, 0, 0)

    # bob's unverified attempt didn't use up his one redemption
    assert await referral_service.register_referral(
        db_session, "bob", code, used_google=True
    )


@pytest.mark.asyncio
async def test_code_redeemed_case_insensitively(db_session: AsyncSession):
    code = await code_for(db_session, "alice")

    assert await referral_service.register_referral(
        db_session, "bob", f"  {code.lower()} ", used_google=True
    )
