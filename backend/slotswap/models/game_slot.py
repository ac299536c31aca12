from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Index
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel

SLOT_OPEN = "Open"
SLOT_CONFIRMED = "Confirmed"
SLOT_CANCELLED = "Cancelled"

SLOT_STATUSES = (SLOT_OPEN, SLOT_CONFIRMED, SLOT_CANCELLED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameSlot(SQLModel, table=True):
    __table_args__ = (
        # (partition_key, slot_id) is the storage address; see utils/table_keys.py
        SAUniqueConstraint("partition_key", "slot_id", name="uq_gameslot_partition_row"),
        Index("idx_gameslot_league_date_status", "league_id", "game_date", "status"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    partition_key: str = Field(index=True)
    slot_id: str

    league_id: str = Field(default="")
    division: str
    offering_team_id: str
    offering_email: str = Field(default="")

    # Stored as entered ("YYYY-MM-DD", "HH:MM"); rows written by imports may be malformed
    game_date: str
    start_time: str
    end_time: str

    field_key: str = Field(default="")  # normalized "parkCode/fieldCode"
    park_name: str = Field(default="")
    field_name: str = Field(default="")
    display_name: str = Field(default="")

    game_type: str = Field(default="Swap")
    notes: str = Field(default="")

    status: str = Field(default=SLOT_OPEN)  # "Open" | "Confirmed" | "Cancelled"
    confirmed_team_id: Optional[str] = Field(default=None)
    confirmed_request_id: Optional[str] = Field(default=None)
    confirmed_by: Optional[str] = Field(default=None)
    confirmed_at: Optional[datetime] = Field(default=None)

    etag: str = Field(default_factory=lambda: uuid4().hex)  # opaque version tag, rewritten on every write
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
