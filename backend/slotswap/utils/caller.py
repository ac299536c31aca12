"""
Caller identity and league-role gates.

Identity itself comes from upstream (auth proxy headers); this module turns
the headers plus the membership directory into a Caller for the services.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from sqlmodel import Session, select

from slotswap.database import get_session
from slotswap.errors import Forbidden, NotAuthenticated, ValidationFailed
from slotswap.models.membership import (
    ROLE_COACH,
    ROLE_LEAGUE_ADMIN,
    ROLE_VIEWER,
    GlobalAdmin,
    LeagueMembership,
)

LEAGUE_HEADER_NAME = "x-league-id"


def same_id(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive identifier match; blank never matches."""
    left = (a or "").strip()
    right = (b or "").strip()
    return bool(left) and left.casefold() == right.casefold()


@dataclass
class Caller:
    user_id: str
    email: str
    league_id: str
    role: str = ""
    division: str = ""
    team_id: str = ""
    is_global_admin: bool = False
    is_member: bool = False

    @property
    def is_admin(self) -> bool:
        return self.is_global_admin or same_id(self.role, ROLE_LEAGUE_ADMIN)

    @property
    def is_coach(self) -> bool:
        return same_id(self.role, ROLE_COACH)

    def require_member(self) -> None:
        if self.is_global_admin:
            return
        if not self.is_member:
            raise Forbidden("Forbidden")

    def require_not_viewer(self) -> None:
        if self.is_global_admin:
            return
        self.require_member()
        if not self.role or same_id(self.role, ROLE_VIEWER):
            raise Forbidden("Forbidden")


def load_caller(session: Session, user_id: str, league_id: str, email: str = "") -> Caller:
    user_id = (user_id or "").strip()
    league_id = (league_id or "").strip()
    if not league_id:
        raise ValidationFailed(f"Missing league scope header. Send {LEAGUE_HEADER_NAME}: <leagueId>.")
    if not user_id:
        raise NotAuthenticated("Not authenticated.")

    caller = Caller(user_id=user_id, email=(email or "").strip(), league_id=league_id)
    caller.is_global_admin = (
        session.exec(select(GlobalAdmin).where(GlobalAdmin.user_id == user_id)).first() is not None
    )

    membership = session.exec(
        select(LeagueMembership).where(LeagueMembership.user_id == user_id, LeagueMembership.league_id == league_id)
    ).first()
    if membership:
        caller.is_member = True
        caller.role = (membership.role or "").strip()
        caller.division = (membership.division or "").strip()
        caller.team_id = (membership.team_id or "").strip()
    return caller


def get_caller(
    x_league_id: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
) -> Caller:
    """FastAPI dependency: resolve the calling user for the league in scope."""
    return load_caller(session, x_user_id or "", x_league_id or "", x_user_email or "")
