"""
Double-booking detection.

A team is double booked when it holds two Confirmed slots on the same date
whose [start, end) ranges overlap. A team "holds" a slot as either the
offering team or the confirmed team, and the scan spans every division in
the league.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from slotswap.models.game_slot import SLOT_CONFIRMED, GameSlot
from slotswap.utils.caller import same_id
from slotswap.utils.table_keys import TableQuery, division_from_partition, slot_partition_prefix
from slotswap.utils.time_ranges import overlaps, parse_range

logger = logging.getLogger(__name__)


@dataclass
class TeamConflict:
    """An existing confirmed booking that blocks a team"""

    team_id: str
    slot_id: str
    division: str
    game_date: str
    start_time: str
    end_time: str
    offering_team_id: str
    confirmed_team_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamId": self.team_id,
            "conflict": {
                "slotId": self.slot_id,
                "division": self.division,
                "gameDate": self.game_date,
                "startTime": self.start_time,
                "endTime": self.end_time,
                "offeringTeamId": self.offering_team_id,
                "confirmedTeamId": self.confirmed_team_id,
            },
        }


def confirmed_slots_on(session: Session, league_id: str, game_date: str) -> List[GameSlot]:
    stmt = (
        TableQuery(GameSlot)
        .partition_prefix(slot_partition_prefix(league_id))
        .where_eq(GameSlot.game_date, game_date)
        .where_eq(GameSlot.status, SLOT_CONFIRMED)
        .statement()
    )
    return list(session.exec(stmt).all())


def find_team_conflict(
    session: Session,
    *,
    league_id: str,
    team_id: str,
    game_date: str,
    start_minutes: int,
    end_minutes: int,
    exclude_slot_id: Optional[str] = None,
) -> Optional[TeamConflict]:
    """
    Return the first confirmed slot that overlaps [start_minutes, end_minutes)
    for ``team_id`` on ``game_date``, or None.

    Scanned slots with a malformed time range are skipped.
    """
    if not (team_id or "").strip():
        return None

    for other in confirmed_slots_on(session, league_id, game_date):
        if exclude_slot_id and same_id(other.slot_id, exclude_slot_id):
            continue
        if not (same_id(other.offering_team_id, team_id) or same_id(other.confirmed_team_id, team_id)):
            continue

        other_range = parse_range(other.start_time, other.end_time)
        if other_range is None:
            logger.warning("Skipping slot %s with malformed time range %r-%r", other.slot_id, other.start_time, other.end_time)
            continue
        if not overlaps(start_minutes, end_minutes, *other_range):
            continue

        return TeamConflict(
            team_id=team_id,
            slot_id=other.slot_id,
            division=other.division or division_from_partition(other.partition_key, league_id),
            game_date=game_date,
            start_time=other.start_time,
            end_time=other.end_time,
            offering_team_id=other.offering_team_id or "",
            confirmed_team_id=other.confirmed_team_id or "",
        )
    return None


def find_conflicts_for_slot(
    session: Session, league_id: str, slot: GameSlot, claiming_team_id: str, start_minutes: int, end_minutes: int
) -> List[TeamConflict]:
    """Check both sides of a prospective game: the offering team, then the claiming team."""
    conflicts: List[TeamConflict] = []
    for team_id in (slot.offering_team_id, claiming_team_id):
        conflict = find_team_conflict(
            session,
            league_id=league_id,
            team_id=team_id,
            game_date=slot.game_date,
            start_minutes=start_minutes,
            end_minutes=end_minutes,
            exclude_slot_id=slot.slot_id,
        )
        if conflict is not None:
            conflicts.append(conflict)
    return conflicts
