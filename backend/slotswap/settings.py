"""
Runtime settings, read from the environment (and an optional .env file).

Services read these at call time (``settings.APPROVAL_POLICY``), never via
``from slotswap.settings import X``, so tests can monkeypatch them.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./slotswap.db")
SQL_ECHO = _flag("SQL_ECHO", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Dates and HH:MM times are stored as entered and interpreted in this zone.
LEAGUE_TIMEZONE = os.getenv("LEAGUE_TIMEZONE", "America/New_York")
DEFAULT_GAME_TYPE = os.getenv("DEFAULT_GAME_TYPE", "Swap")

# Legacy approve endpoint gate: "member" or "offering_coach"
APPROVAL_POLICY_MEMBER = "member"
APPROVAL_POLICY_OFFERING_COACH = "offering_coach"
APPROVAL_POLICY = os.getenv("SLOT_APPROVAL_POLICY", APPROVAL_POLICY_MEMBER).strip().lower()

APPROVAL_CONFLICT_CHECK = _flag("APPROVAL_CONFLICT_CHECK", "true")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

# Look up rows under the pre-migration partition keys when the canonical key misses
LEGACY_KEY_FALLBACK = _flag("LEGACY_KEY_FALLBACK", "true")
