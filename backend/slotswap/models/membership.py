from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel

ROLE_LEAGUE_ADMIN = "LeagueAdmin"
ROLE_COACH = "Coach"
ROLE_VIEWER = "Viewer"


class LeagueMembership(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("user_id", "league_id", name="uq_membership_user_league"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    league_id: str
    role: str = Field(default=ROLE_VIEWER)
    # Coach team assignment
    division: Optional[str] = Field(default=None)
    team_id: Optional[str] = Field(default=None)


class GlobalAdmin(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(unique=True)
