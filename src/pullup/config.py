# src/pullup/config.py

"""Runtime configuration read from environment variables."""

import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./pullup.db")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))
# Seconds a SQLite writer waits on a locked database before giving up
DB_SQLITE_TIMEOUT = float(os.getenv("DB_SQLITE_TIMEOUT", "30"))

# Rating
SEED_RATING = int(os.getenv("SEED_RATING", "1200"))
RATING_FLOOR = int(os.getenv("RATING_FLOOR", "100"))
DEFAULT_K_FACTOR = int(os.getenv("DEFAULT_K_FACTOR", "32"))

# Matches and leaderboards
NOTE_MAX_LENGTH = int(os.getenv("NOTE_MAX_LENGTH", "200"))
# Largest score a team can be credited with (fits a 32-bit INTEGER column)
SCORE_MAX = int(os.getenv("SCORE_MAX", str(2**31 - 1)))
LEADERBOARD_DEFAULT_LIMIT = int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "50"))

# Identity and referrals
GUEST_ID_PREFIX = os.getenv("GUEST_ID_PREFIX", "guest_")
REFERRAL_CODE_LENGTH = int(os.getenv("REFERRAL_CODE_LENGTH", "8"))


def k_factor_for(sport: str) -> int:
    """Return the K-factor for a sport.

    A per-sport override is read from ``K_FACTOR_<SPORT>`` (for example
    ``K_FACTOR_PICKLEBALL=24``); otherwise ``DEFAULT_K_FACTOR`` applies.
    """
    override = os.getenv(f"K_FACTOR_{sport.upper()}")
    if override:
        return int(override)
    return DEFAULT_K_FACTOR
