"""
Canonical parser for composite field keys ("parkCode/fieldCode").

Both sides are slugified so "Central Park / Field 1" and "central-park/field-1"
address the same directory entry.
"""

import re
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from slotswap.errors import StateConflict, ValidationFailed
from slotswap.models.field import LeagueField

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def slugify(value: Optional[str]) -> str:
    s = (value or "").strip().lower()
    return _NON_ALNUM.sub("-", s).strip("-")


@dataclass(frozen=True)
class FieldKey:
    park_code: str
    field_code: str

    def __str__(self) -> str:
        return f"{self.park_code}/{self.field_code}"


@dataclass
class ResolvedField:
    key: FieldKey
    park_name: str
    field_name: str
    display_name: str


def parse_field_key(raw: Optional[str]) -> Optional[FieldKey]:
    """
    Parse "parkCode/fieldCode" into a normalized FieldKey.

    - Leading/trailing slashes and whitespace are ignored
    - Exactly two non-empty parts are required
    - Returns None when the key is malformed
    """
    value = (raw or "").strip().strip("/")
    parts = [p.strip() for p in value.split("/") if p.strip()]
    if len(parts) != 2:
        return None
    park_code, field_code = slugify(parts[0]), slugify(parts[1])
    if not park_code or not field_code:
        return None
    return FieldKey(park_code=park_code, field_code=field_code)


def resolve_field(session: Session, league_id: str, raw_key: Optional[str]) -> ResolvedField:
    """
    Resolve a field key against the league's field directory.

    Raises:
        ValidationFailed VALIDATION: key is not parkCode/fieldCode
        ValidationFailed FIELD_NOT_FOUND: no such field in this league
        StateConflict FIELD_INACTIVE: field exists but is inactive
    """
    key = parse_field_key(raw_key)
    if key is None:
        raise ValidationFailed("fieldKey must be parkCode/fieldCode.")

    field = session.exec(
        select(LeagueField).where(
            LeagueField.league_id == league_id,
            LeagueField.park_code == key.park_code,
            LeagueField.field_code == key.field_code,
        )
    ).first()
    if not field:
        raise ValidationFailed("Field not found. Import fields first.", code="FIELD_NOT_FOUND")
    if not field.is_active:
        raise StateConflict("Field exists but is inactive.", code="FIELD_INACTIVE")

    park_name = field.park_name or ""
    field_name = field.field_name or ""
    display_name = field.display_name or f"{park_name} > {field_name}"
    return ResolvedField(key=key, park_name=park_name, field_name=field_name, display_name=display_name)
