# src/pullup/identity.py

"""Helpers for the player identifier namespaces.

Player identifiers are opaque strings owned by the external auth system.
Guest-session accounts live in a reserved namespace (``guest_`` prefix by
default): they may play and accumulate stats, but are hidden from
leaderboards and cannot redeem referral codes.
"""

from pullup import config


def is_guest_identifier(player_id: str) -> bool:
    """True if the identifier belongs to the guest-session namespace."""
    return player_id.startswith(config.GUEST_ID_PREFIX)


def guest_namespace_pattern() -> str:
    """SQL LIKE pattern matching guest identifiers (escape char is ``\\``)."""
    escaped = (
        config.GUEST_ID_PREFIX.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"{escaped}%"
