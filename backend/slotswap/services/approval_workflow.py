"""
Legacy approval: the offering side picks one of several Pending claims.

Kept for clients that still create Pending claims. Slots and claims may be
stored under either key scheme (see key_resolution). Confirmation runs
through the same confirm_slot transition as the direct claim path.
"""

import logging
from typing import Any, Dict, Optional

from sqlmodel import Session

from slotswap import settings
from slotswap.errors import Forbidden, NotFound, StateConflict, ValidationFailed
from slotswap.models.game_slot import SLOT_CANCELLED, SLOT_CONFIRMED, GameSlot
from slotswap.models.slot_request import REQUEST_APPROVED, REQUEST_DENIED
from slotswap.services import slot_requests
from slotswap.services.concurrency import PreconditionFailed
from slotswap.services.confirmation import check_double_booking, confirm_slot
from slotswap.services.key_resolution import KeyResolver
from slotswap.utils.caller import Caller, same_id

logger = logging.getLogger(__name__)


def _authorize(caller: Caller, slot: GameSlot, division: str) -> None:
    """
    Approval gate, selected by SLOT_APPROVAL_POLICY.

    member:          any non-viewer member of the league
    offering_coach:  administrators, or the coach of the offering team
    """
    caller.require_not_viewer()
    if settings.APPROVAL_POLICY != settings.APPROVAL_POLICY_OFFERING_COACH or caller.is_admin:
        return
    if not caller.is_coach:
        raise Forbidden("Forbidden")
    if not caller.team_id:
        raise ValidationFailed(
            "Coach must be assigned to a team to approve slot requests.", code="TEAM_REQUIRED"
        )
    if caller.division and not same_id(caller.division, division):
        raise Forbidden("Forbidden")
    if not same_id(caller.team_id, slot.offering_team_id):
        raise Forbidden("Only the offering coach (or LeagueAdmin) can approve this slot request.")


def approve_request(
    session: Session,
    caller: Caller,
    division: str,
    slot_id: str,
    request_id: str,
    approved_by_email: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Approve one claim and confirm the slot for its team.

    Idempotent for the claim the slot is already confirmed with.

    Raises:
        NotFound NOT_FOUND (slot or claim)
        StateConflict CANCELLED / CONFLICT / DOUBLE_BOOKING
        Forbidden / ValidationFailed from the approval gate
    """
    division = (division or "").strip()
    slot_id = (slot_id or "").strip()
    request_id = (request_id or "").strip()
    resolver = KeyResolver(session)

    resolved = resolver.load_slot(caller.league_id, division, slot_id)
    if resolved is None:
        raise NotFound("Slot not found")
    slot = resolved.row
    slot_etag = slot.etag
    league_id = slot.league_id or caller.league_id

    _authorize(caller, slot, division)
    approved_by = (approved_by_email or caller.email or "").strip()
    result = {"ok": True, "slotId": slot_id, "division": division, "requestId": request_id, "status": SLOT_CONFIRMED}

    if slot.status == SLOT_CANCELLED:
        raise StateConflict("Slot is cancelled", code="CANCELLED")
    if slot.status == SLOT_CONFIRMED:
        if same_id(slot.confirmed_request_id, request_id):
            return result
        raise StateConflict("Slot already confirmed")

    claim_found = resolver.load_claim(league_id, division, slot_id, request_id)
    if claim_found is None:
        raise NotFound("Request not found")
    claim = claim_found.row
    if claim.status == REQUEST_DENIED:
        raise StateConflict(f"Request not pending (status: {claim.status})")

    if settings.APPROVAL_CONFLICT_CHECK:
        check_double_booking(session, league_id, slot, claim.requesting_team_id)

    # An Approved claim on an Open slot is a half-applied confirm; finish it.
    if claim.status != REQUEST_APPROVED:
        try:
            slot_requests.approve_claim(session, claim, approved_by)
        except PreconditionFailed:
            raise StateConflict("Request was changed by another request. Reload and retry.")

    confirm_slot(session, league_id, slot, claim, confirmed_by=approved_by, slot_etag=slot_etag)
    logger.info(
        "Request %s approved for slot %s (%s keys)", request_id, slot_id, resolved.scheme
    )
    return result
