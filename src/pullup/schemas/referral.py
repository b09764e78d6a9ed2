# src/pullup/schemas/referral.py

"""Pydantic schemas for the referral and raffle ticket ledger."""

from pydantic import BaseModel, ConfigDict, Field


class ReferralCodeRead(BaseModel):
    """A player's shareable referral code."""

    player_id: str
    code: str

    model_config = ConfigDict(from_attributes=True)


class ReferralRegister(BaseModel):
    """Payload for redeeming a referral code.

    used_google is the proof of a verified signup; only verified referees
    can earn their referrer a ticket.
    """

    referee_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    used_google: bool = False


class ReferralRegisterResult(BaseModel):
    registered: bool


class ReferralQualifyResult(BaseModel):
    qualified: bool


class TicketStats(BaseModel):
    """Raffle ticket tallies for a referrer."""

    player_id: str
    tickets: int = Field(0, ge=0)
    total_referrals: int = Field(0, ge=0)
    pending_referrals: int = Field(0, ge=0)

    model_config = ConfigDict(from_attributes=True)
