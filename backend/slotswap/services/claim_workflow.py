"""
Direct-confirm claim: a team takes an Open slot in one step.

Order of checks:
1. caller has a team assignment in the slot's division
2. slot exists and is Open
3. caller's team is not the offering team
4. slot date/time are well formed (rows from imports may not be)
5. neither team is double booked on that date
6. claim row written Approved
7. slot confirmed with a version check; the loser's claim is Denied
8. other Pending claims swept to Denied (best effort)
"""

import logging
from typing import Any, Dict, Optional

from sqlmodel import Session

from slotswap.errors import StateConflict, ValidationFailed
from slotswap.models.game_slot import SLOT_CONFIRMED, SLOT_OPEN
from slotswap.models.slot_request import REQUEST_APPROVED
from slotswap.services import slot_requests, slot_store
from slotswap.services.confirmation import check_double_booking, confirm_slot
from slotswap.utils.caller import Caller, same_id
from slotswap.utils.time_ranges import is_valid_game_date, parse_range

logger = logging.getLogger(__name__)


def claim_slot(
    session: Session, caller: Caller, division: str, slot_id: str, notes: Optional[str] = None
) -> Dict[str, Any]:
    """
    Claim and confirm a slot for the caller's team.

    Returns the claim summary: requestId, requestingTeamId, status,
    slotStatus, confirmedTeamId, requestedAt.

    Raises:
        ValidationFailed TEAM_REQUIRED / DIVISION_MISMATCH / SELF_CLAIM / VALIDATION
        NotFound NOT_FOUND
        StateConflict NOT_OPEN / DOUBLE_BOOKING / CONFLICT (lost the race)
    """
    division = (division or "").strip()
    slot_id = (slot_id or "").strip()
    if not division:
        raise ValidationFailed("Division is required.")
    if not slot_id:
        raise ValidationFailed("slotId is required.")

    caller.require_not_viewer()
    my_team_id = caller.team_id
    if not my_team_id:
        raise ValidationFailed(
            "Coach role requires an assigned team to accept a game request.", code="TEAM_REQUIRED"
        )
    if caller.division and not same_id(caller.division, division):
        raise ValidationFailed(
            "You can only accept game requests in your exact division.", code="DIVISION_MISMATCH"
        )

    slot = slot_store.load_slot(session, caller.league_id, division, slot_id).row
    if slot.status != SLOT_OPEN:
        raise StateConflict(f"Slot is not open (status: {slot.status}).", code="NOT_OPEN")
    slot_etag = slot.etag
    if same_id(slot.offering_team_id, my_team_id):
        raise ValidationFailed("You cannot accept your own game request.", code="SELF_CLAIM")

    if not is_valid_game_date(slot.game_date):
        raise ValidationFailed("Slot has invalid GameDate.")
    if parse_range(slot.start_time, slot.end_time) is None:
        raise ValidationFailed("Slot has invalid StartTime/EndTime.")

    league_id = slot.league_id or caller.league_id
    check_double_booking(session, league_id, slot, my_team_id)

    claim = slot_requests.create_approved_claim(
        session,
        league_id=league_id,
        division=slot.division,
        slot_id=slot.slot_id,
        requesting_team_id=my_team_id,
        requesting_user_id=caller.user_id,
        requesting_email=caller.email,
        notes=(notes or "").strip(),
    )
    confirm_slot(session, league_id, slot, claim, confirmed_by=caller.email, slot_etag=slot_etag)

    logger.info("Team %s claimed slot %s (request %s)", my_team_id, slot.slot_id, claim.request_id)
    return {
        "requestId": claim.request_id,
        "requestingTeamId": my_team_id,
        "status": REQUEST_APPROVED,
        "slotStatus": SLOT_CONFIRMED,
        "confirmedTeamId": my_team_id,
        "requestedAt": claim.requested_at.isoformat() if claim.requested_at else None,
    }
