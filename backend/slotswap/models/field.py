from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class LeagueField(SQLModel, table=True):
    """Field directory entry. Maintained by the field import; read-only here."""

    __table_args__ = (SAUniqueConstraint("league_id", "park_code", "field_code", name="uq_field_league_park_field"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: str = Field(index=True)
    park_code: str
    field_code: str
    park_name: str = Field(default="")
    field_name: str = Field(default="")
    display_name: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)
