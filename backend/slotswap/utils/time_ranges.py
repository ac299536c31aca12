"""
Helpers for "HH:MM" (24-hour) times and "YYYY-MM-DD" game dates.

Times are interpreted in the league timezone and stored as strings; no
conversion is ever performed. Ranges are half-open: [start, end).
"""

from datetime import date
from typing import Optional, Tuple

from slotswap.errors import ValidationFailed


def parse_minutes(hhmm: Optional[str]) -> Optional[int]:
    """Return minutes after midnight for "HH:MM", or None if malformed."""
    s = (hhmm or "").strip()
    parts = s.split(":", 1)
    if len(parts) != 2:
        return None
    hours, minutes = parts[0].strip(), parts[1].strip()
    if not hours.isdigit() or not minutes.isdigit():
        return None
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        return None
    return h * 60 + m


def parse_range(start_time: Optional[str], end_time: Optional[str]) -> Optional[Tuple[int, int]]:
    """(start_minutes, end_minutes) for a well-formed range with start < end, else None."""
    start = parse_minutes(start_time)
    end = parse_minutes(end_time)
    if start is None or end is None or start >= end:
        return None
    return start, end


def require_range(start_time: Optional[str], end_time: Optional[str]) -> Tuple[int, int]:
    start = parse_minutes(start_time)
    end = parse_minutes(end_time)
    if start is None or end is None:
        raise ValidationFailed("Invalid time format. Expected HH:MM (24-hour).")
    if start >= end:
        raise ValidationFailed("startTime must be before endTime.")
    return start, end


def is_valid_game_date(value: Optional[str]) -> bool:
    s = (value or "").strip()
    # date.fromisoformat accepts other shapes on newer Pythons; pin YYYY-MM-DD
    if len(s) != 10 or s[4] != "-" or s[7] != "-":
        return False
    try:
        date.fromisoformat(s)
    except ValueError:
        return False
    return True


def require_game_date(value: Optional[str], field_name: str = "gameDate") -> str:
    s = (value or "").strip()
    if not s:
        raise ValidationFailed(f"{field_name} is required.")
    if not is_valid_game_date(s):
        raise ValidationFailed(f"{field_name} must be YYYY-MM-DD.")
    return s


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval overlap; touching ranges (10:00-11:00, 11:00-12:00) do not overlap."""
    return start < other_end and other_start < end
