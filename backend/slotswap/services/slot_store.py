"""
Slot Store: the only writer of GameSlot rows.

Create, list, patch, cancel and the confirm transition all live here.
Every update of an existing row goes through compare_and_swap so a write
based on a stale read is rejected instead of overwriting a newer state.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlmodel import Session

from slotswap import settings
from slotswap.errors import Forbidden, NotFound, StateConflict, ValidationFailed
from slotswap.models.game_slot import SLOT_CANCELLED, SLOT_CONFIRMED, SLOT_OPEN, SLOT_STATUSES, GameSlot
from slotswap.services import slot_events
from slotswap.services.concurrency import PreconditionFailed, compare_and_swap, insert_row
from slotswap.services.key_resolution import KeyResolver, Resolved
from slotswap.utils.caller import Caller, same_id
from slotswap.utils.field_keys import resolve_field
from slotswap.utils.table_keys import TableQuery, slot_partition, slot_partition_prefix
from slotswap.utils.time_ranges import require_game_date, require_range

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def slot_to_dict(slot: GameSlot, league_id: Optional[str] = None) -> Dict[str, Any]:
    """Collaborator-facing shape of a slot"""
    return {
        "slotId": slot.slot_id,
        "leagueId": slot.league_id or league_id or "",
        "division": slot.division,
        "offeringTeamId": slot.offering_team_id or "",
        "offeringEmail": slot.offering_email or "",
        "confirmedTeamId": slot.confirmed_team_id or "",
        "confirmedRequestId": slot.confirmed_request_id or "",
        "confirmedBy": slot.confirmed_by or "",
        "confirmedAt": _iso(slot.confirmed_at),
        "gameDate": slot.game_date,
        "startTime": slot.start_time,
        "endTime": slot.end_time,
        "parkName": slot.park_name or "",
        "fieldName": slot.field_name or "",
        "displayName": slot.display_name or "",
        "fieldKey": slot.field_key or "",
        "gameType": slot.game_type or settings.DEFAULT_GAME_TYPE,
        "status": slot.status or SLOT_OPEN,
        "notes": slot.notes or "",
        "timeZone": settings.LEAGUE_TIMEZONE,
        "createdAt": _iso(slot.created_at),
        "updatedAt": _iso(slot.updated_at),
    }


def _event_payload(slot: GameSlot, **extra: Any) -> Dict[str, Any]:
    payload = {"leagueId": slot.league_id, "division": slot.division, "slotId": slot.slot_id, "status": slot.status}
    payload.update(extra)
    return payload


def _require_coach_owns(caller: Caller, division: str, offering_team_id: str, action: str) -> None:
    """Coaches may only act for their own team in their own division; admins skip this."""
    if caller.is_admin or not caller.is_coach:
        return
    if not caller.team_id:
        raise ValidationFailed(f"Coach role requires an assigned team to {action}.", code="TEAM_REQUIRED")
    if not same_id(caller.division, division):
        raise Forbidden(f"You can only {action} within your assigned division (exact match).", code="TEAM_MISMATCH")
    if not same_id(caller.team_id, offering_team_id):
        raise Forbidden(f"You can only {action} for your assigned team.", code="TEAM_MISMATCH")


# ============================================================================
# Reads
# ============================================================================


def load_slot(session: Session, league_id: str, division: str, slot_id: str) -> Resolved[GameSlot]:
    division, slot_id = _clean(division), _clean(slot_id)
    if not division or not slot_id:
        raise ValidationFailed("division and slotId are required")
    resolved = KeyResolver(session).load_slot(league_id, division, slot_id)
    if resolved is None:
        raise NotFound("Slot not found.")
    return resolved


def normalize_status(status: Optional[str]) -> Optional[str]:
    value = _clean(status)
    if not value:
        return None
    for known in SLOT_STATUSES:
        if known.lower() == value.lower():
            return known
    raise ValidationFailed(f"status must be one of {', '.join(SLOT_STATUSES)}.")


def list_slots(
    session: Session,
    league_id: str,
    *,
    division: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> List[GameSlot]:
    """
    List slots for a league.

    Without a status filter only Open and Confirmed slots are returned;
    Cancelled slots are visible only when asked for explicitly.
    Results are ordered by gameDate, startTime, displayName.
    """
    division = _clean(division)
    status_filter = normalize_status(status)
    date_from = require_game_date(date_from, "dateFrom") if _clean(date_from) else None
    date_to = require_game_date(date_to, "dateTo") if _clean(date_to) else None

    query = TableQuery(GameSlot)
    if division:
        query.partition(slot_partition(league_id, division))
    else:
        query.partition_prefix(slot_partition_prefix(league_id))
    if status_filter:
        query.where_eq(GameSlot.status, status_filter)
    query.where_range(GameSlot.game_date, ge=date_from, le=date_to)

    slots = [
        s
        for s in session.exec(query.statement()).all()
        if status_filter or s.status != SLOT_CANCELLED
    ]
    return sorted(slots, key=lambda s: (s.game_date or "", s.start_time or "", s.display_name or ""))


# ============================================================================
# Writes
# ============================================================================


def create_slot(
    session: Session,
    caller: Caller,
    *,
    division: Optional[str],
    offering_team_id: Optional[str],
    game_date: Optional[str],
    start_time: Optional[str],
    end_time: Optional[str],
    field_key: Optional[str],
    game_type: Optional[str] = None,
    notes: Optional[str] = None,
    offering_email: Optional[str] = None,
) -> GameSlot:
    """
    Create an Open slot.

    Raises:
        ValidationFailed VALIDATION / FIELD_NOT_FOUND / TEAM_REQUIRED
        Forbidden FORBIDDEN (viewer) / TEAM_MISMATCH (coach for another team)
        StateConflict FIELD_INACTIVE
    """
    caller.require_not_viewer()

    division = _clean(division)
    offering_team_id = _clean(offering_team_id)
    game_date = _clean(game_date)
    start_time = _clean(start_time)
    end_time = _clean(end_time)
    field_key = _clean(field_key)
    if not all([division, offering_team_id, game_date, start_time, end_time, field_key]):
        raise ValidationFailed("division, offeringTeamId, gameDate, startTime, endTime, fieldKey are required")

    require_game_date(game_date)
    require_range(start_time, end_time)
    _require_coach_owns(caller, division, offering_team_id, "offer slots")
    field = resolve_field(session, caller.league_id, field_key)

    now = _now()
    slot = GameSlot(
        partition_key=slot_partition(caller.league_id, division),
        slot_id=uuid4().hex,
        league_id=caller.league_id,
        division=division,
        offering_team_id=offering_team_id,
        offering_email=_clean(offering_email) or caller.email,
        game_date=game_date,
        start_time=start_time,
        end_time=end_time,
        field_key=str(field.key),
        park_name=field.park_name,
        field_name=field.field_name,
        display_name=field.display_name,
        game_type=_clean(game_type) or settings.DEFAULT_GAME_TYPE,
        notes=_clean(notes),
        status=SLOT_OPEN,
        created_at=now,
        updated_at=now,
    )
    insert_row(session, slot)

    logger.info("Slot %s created in %s/%s by team %s", slot.slot_id, caller.league_id, division, offering_team_id)
    slot_events.emit(slot_events.SLOT_CREATED, _event_payload(slot, offeringTeamId=offering_team_id))
    return slot


def patch_slot(
    session: Session,
    caller: Caller,
    division: str,
    slot_id: str,
    changes: Dict[str, Optional[str]],
) -> GameSlot:
    """
    Partially update an Open slot.

    ``changes`` maps gameDate/startTime/endTime/fieldKey/gameType/notes to a new
    value; keys that are absent or None are left alone. The resulting
    date, time range and field key are validated exactly as on create.
    """
    caller.require_not_viewer()

    for name in ("gameDate", "startTime", "endTime", "fieldKey"):
        if changes.get(name) is not None and not _clean(changes.get(name)):
            raise ValidationFailed(f"{name} is required")

    slot = load_slot(session, caller.league_id, division, slot_id).row
    if slot.status != SLOT_OPEN:
        raise StateConflict("Only open slots can be updated.", code="NOT_OPEN")
    _require_coach_owns(caller, slot.division, slot.offering_team_id, "update slots")

    def pick(name: str, current: str) -> str:
        value = changes.get(name)
        return current if value is None else _clean(value)

    values: Dict[str, Any] = {
        "game_date": pick("gameDate", slot.game_date),
        "start_time": pick("startTime", slot.start_time),
        "end_time": pick("endTime", slot.end_time),
        "game_type": pick("gameType", slot.game_type),
        "notes": pick("notes", slot.notes),
    }
    require_game_date(values["game_date"])
    require_range(values["start_time"], values["end_time"])

    if changes.get("fieldKey") is not None:
        field = resolve_field(session, caller.league_id, changes["fieldKey"])
        values.update(
            field_key=str(field.key),
            park_name=field.park_name,
            field_name=field.field_name,
            display_name=field.display_name,
        )
    values["updated_at"] = _now()

    try:
        compare_and_swap(session, slot, values)
    except PreconditionFailed:
        raise StateConflict("Slot was modified by another request. Reload and retry.")

    logger.info("Slot %s updated", slot.slot_id)
    slot_events.emit(slot_events.SLOT_UPDATED, _event_payload(slot))
    return slot


def cancel_slot(session: Session, caller: Caller, division: str, slot_id: str) -> GameSlot:
    """
    Cancel a slot. Idempotent: an already Cancelled slot is returned as-is.

    Allowed for the offering team, the confirmed team, or an administrator.
    """
    caller.require_member()
    slot = load_slot(session, caller.league_id, division, slot_id).row
    if slot.status == SLOT_CANCELLED:
        return slot

    can_cancel = caller.is_admin or (
        bool(caller.team_id)
        and (same_id(caller.team_id, slot.offering_team_id) or same_id(caller.team_id, slot.confirmed_team_id))
    )
    if not can_cancel:
        raise Forbidden("Forbidden")

    try:
        compare_and_swap(session, slot, {"status": SLOT_CANCELLED, "updated_at": _now()})
    except PreconditionFailed:
        session.refresh(slot)
        if slot.status == SLOT_CANCELLED:
            return slot
        raise StateConflict("Slot was modified by another request. Reload and retry.")

    logger.info("Slot %s cancelled by %s", slot.slot_id, caller.user_id)
    slot_events.emit(slot_events.SLOT_CANCELLED, _event_payload(slot, cancelledBy=caller.user_id))
    return slot


def mark_confirmed(
    session: Session,
    slot: GameSlot,
    team_id: str,
    request_id: str,
    confirmed_by: str = "",
    expected_etag: Optional[str] = None,
) -> GameSlot:
    """
    Open -> Confirmed, version-checked against the etag ``slot`` was read with
    (``expected_etag`` if the caller captured it before committing other rows).

    Raises PreconditionFailed if any other write landed first.
    """
    now = _now()
    compare_and_swap(
        session,
        slot,
        {
            "status": SLOT_CONFIRMED,
            "confirmed_team_id": team_id,
            "confirmed_request_id": request_id,
            "confirmed_by": confirmed_by,
            "confirmed_at": now,
            "updated_at": now,
        },
        expected_etag=expected_etag,
    )
    logger.info("Slot %s confirmed for team %s (request %s)", slot.slot_id, team_id, request_id)
    slot_events.emit(
        slot_events.SLOT_CONFIRMED, _event_payload(slot, confirmedTeamId=team_id, confirmedRequestId=request_id)
    )
    return slot
