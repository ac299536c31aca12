"""
The single Open -> Confirmed transition shared by the direct claim path and
the legacy approval path, plus reconciliation of half-applied confirms.

Slot and claim are separate rows with independent etags and no cross-row
transaction. The claim is written Approved first, then the slot is
confirmed with a version check. A crash in between leaves "claim Approved,
slot still Open", which reconcile_slot() repairs.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from slotswap.errors import Forbidden, StateConflict
from slotswap.models.game_slot import SLOT_CANCELLED, SLOT_CONFIRMED, SLOT_OPEN, GameSlot
from slotswap.models.slot_request import REQUEST_APPROVED, REQUEST_PENDING, SlotRequest
from slotswap.services import slot_requests, slot_store
from slotswap.services.concurrency import PreconditionFailed
from slotswap.services.conflict_detector import TeamConflict, find_conflicts_for_slot
from slotswap.utils.caller import Caller
from slotswap.utils.time_ranges import parse_range

logger = logging.getLogger(__name__)


def double_booking_error(conflicts: List[TeamConflict]) -> StateConflict:
    return StateConflict(
        "This game overlaps an existing confirmed game for one of the teams.",
        code="DOUBLE_BOOKING",
        details={"conflicts": [c.to_dict() for c in conflicts]},
    )


def check_double_booking(session: Session, league_id: str, slot: GameSlot, claiming_team_id: str) -> None:
    """Raise DOUBLE_BOOKING if confirming ``slot`` for ``claiming_team_id`` would overlap either team."""
    time_range = parse_range(slot.start_time, slot.end_time)
    if time_range is None:
        raise StateConflict("Slot has invalid StartTime/EndTime.", code="CONFLICT")
    conflicts = find_conflicts_for_slot(session, league_id, slot, claiming_team_id, *time_range)
    if conflicts:
        raise double_booking_error(conflicts)


def _lost_race_error(session: Session, slot: GameSlot) -> StateConflict:
    session.refresh(slot)
    if slot.status == SLOT_CANCELLED:
        return StateConflict("Slot was cancelled.")
    if slot.status == SLOT_CONFIRMED:
        return StateConflict("Slot was confirmed by another team.")
    return StateConflict("Slot was modified by another request. Reload and retry.")


def confirm_slot(
    session: Session,
    league_id: str,
    slot: GameSlot,
    claim: SlotRequest,
    confirmed_by: str = "",
    slot_etag: Optional[str] = None,
) -> List[str]:
    """
    Bind ``slot`` to an already-Approved ``claim``.

    ``slot_etag`` is the slot version the caller validated against; the
    confirm only lands if nothing else wrote the slot since.

    On a lost version check the claim is marked Denied and CONFLICT is raised;
    the slot is left as the winner wrote it. On success, remaining Pending
    claims are swept to Denied (best effort) and their ids returned.
    """
    try:
        slot_store.mark_confirmed(
            session, slot, claim.requesting_team_id, claim.request_id, confirmed_by, expected_etag=slot_etag
        )
    except PreconditionFailed:
        session.refresh(claim)
        slot_requests.deny_claim(session, claim)
        raise _lost_race_error(session, slot)

    return slot_requests.sweep_pending(
        session, league_id, slot.division, slot.slot_id, keep_request_id=claim.request_id
    )


def reconcile_slot(session: Session, caller: Caller, division: str, slot_id: str) -> Dict[str, Any]:
    """
    Repair a slot whose claims disagree with it. Administrators only.

    - Open slot with Approved claims: the oldest is confirmed if it still
      passes double-booking checks; otherwise (or if it loses a race) the
      Approved claims are denied.
    - Confirmed slot: every claim other than the confirmed one that is
      Approved or Pending is denied.
    - Cancelled slot: Pending claims are denied.
    """
    if not caller.is_admin:
        raise Forbidden("Only league administrators can reconcile slots.")

    slot = slot_store.load_slot(session, caller.league_id, division, slot_id).row
    league_id = slot.league_id or caller.league_id
    denied: List[str] = []

    if slot.status == SLOT_OPEN:
        approved = [
            c
            for c in slot_requests.list_claims(session, league_id, slot.division, slot.slot_id)
            if c.status == REQUEST_APPROVED
        ]
        approved.sort(key=lambda c: c.requested_at.isoformat() if c.requested_at else "")
        winner: Optional[SlotRequest] = approved[0] if approved else None
        if winner is not None:
            try:
                check_double_booking(session, league_id, slot, winner.requesting_team_id)
                slot_store.mark_confirmed(
                    session, slot, winner.requesting_team_id, winner.request_id, winner.approved_by or ""
                )
                logger.info("Reconciled slot %s: adopted approved request %s", slot.slot_id, winner.request_id)
            except (StateConflict, PreconditionFailed) as exc:
                logger.warning("Reconcile of slot %s could not adopt %s: %s", slot.slot_id, winner.request_id, exc)
                session.refresh(slot)

    to_deny: List[SlotRequest] = []
    for claim in slot_requests.list_claims(session, league_id, slot.division, slot.slot_id):
        if slot.status == SLOT_CONFIRMED and claim.request_id == slot.confirmed_request_id:
            continue
        if claim.status == REQUEST_PENDING and slot.status in (SLOT_CONFIRMED, SLOT_CANCELLED):
            to_deny.append(claim)
        elif claim.status == REQUEST_APPROVED:
            to_deny.append(claim)

    for claim in to_deny:
        if slot_requests.deny_claim(session, claim):
            denied.append(claim.request_id)

    session.refresh(slot)
    logger.info("Reconciled slot %s: status=%s denied=%d", slot.slot_id, slot.status, len(denied))
    return {
        "slotId": slot.slot_id,
        "division": slot.division,
        "slotStatus": slot.status,
        "confirmedRequestId": slot.confirmed_request_id or "",
        "deniedRequestIds": denied,
    }
