from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel

REQUEST_PENDING = "Pending"
REQUEST_APPROVED = "Approved"
REQUEST_DENIED = "Denied"


class SlotRequest(SQLModel, table=True):
    """A team's claim on a slot. Rows are never deleted."""

    __table_args__ = (SAUniqueConstraint("partition_key", "request_id", name="uq_slotrequest_partition_row"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    partition_key: str = Field(index=True)
    request_id: str

    league_id: str = Field(default="")
    division: str
    slot_id: str

    requesting_user_id: str = Field(default="")
    requesting_team_id: str
    requesting_email: str = Field(default="")
    notes: str = Field(default="")

    status: str = Field(default=REQUEST_PENDING)  # "Pending" | "Approved" | "Denied"
    approved_by: Optional[str] = Field(default=None)

    etag: str = Field(default_factory=lambda: uuid4().hex)
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    approved_at: Optional[datetime] = Field(default=None)
    rejected_at: Optional[datetime] = Field(default=None)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
