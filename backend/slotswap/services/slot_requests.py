"""
Claim ledger: creation and status changes of SlotRequest rows.

Claims are append-mostly. After creation only two transitions happen:
Pending -> Approved for the winning claim, and Pending/Approved -> Denied
for claims that lost. Rows are never deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlmodel import Session

from slotswap.models.slot_request import REQUEST_APPROVED, REQUEST_DENIED, REQUEST_PENDING, SlotRequest
from slotswap.services import slot_events
from slotswap.services.concurrency import PreconditionFailed, compare_and_swap, insert_row
from slotswap.services.key_resolution import KeyResolver
from slotswap.utils.table_keys import request_partition

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def claim_to_dict(claim: SlotRequest) -> Dict[str, Any]:
    return {
        "requestId": claim.request_id,
        "requestingTeamId": claim.requesting_team_id or "",
        "requestingEmail": claim.requesting_email or "",
        "notes": claim.notes or "",
        "status": claim.status or REQUEST_PENDING,
        "requestedAt": _iso(claim.requested_at),
        "approvedAt": _iso(claim.approved_at),
        "rejectedAt": _iso(claim.rejected_at),
    }


def list_claims(session: Session, league_id: str, division: str, slot_id: str) -> List[SlotRequest]:
    """Claims for a slot, newest first"""
    claims = KeyResolver(session).list_claims(league_id, division, slot_id)
    return sorted(claims, key=lambda c: _iso(c.requested_at) or "", reverse=True)


def create_approved_claim(
    session: Session,
    *,
    league_id: str,
    division: str,
    slot_id: str,
    requesting_team_id: str,
    requesting_user_id: str,
    requesting_email: str,
    notes: str,
) -> SlotRequest:
    """Direct-confirm claims are born Approved; there is no Pending window."""
    now = _now()
    claim = SlotRequest(
        partition_key=request_partition(league_id, division, slot_id),
        request_id=uuid4().hex,
        league_id=league_id,
        division=division,
        slot_id=slot_id,
        requesting_user_id=requesting_user_id,
        requesting_team_id=requesting_team_id,
        requesting_email=requesting_email,
        notes=notes,
        status=REQUEST_APPROVED,
        approved_by=requesting_email,
        requested_at=now,
        approved_at=now,
        updated_at=now,
    )
    return insert_row(session, claim)


def approve_claim(session: Session, claim: SlotRequest, approved_by: str) -> SlotRequest:
    """Pending -> Approved. Raises PreconditionFailed if the claim changed since it was read."""
    now = _now()
    return compare_and_swap(
        session,
        claim,
        {"status": REQUEST_APPROVED, "approved_by": approved_by, "approved_at": now, "updated_at": now},
    )


def deny_claim(session: Session, claim: SlotRequest) -> bool:
    """
    Best-effort -> Denied. Returns False (and logs) if the write lost a race;
    the slot row stays authoritative either way.
    """
    now = _now()
    request_id = claim.request_id
    try:
        compare_and_swap(session, claim, {"status": REQUEST_DENIED, "rejected_at": now, "updated_at": now})
    except PreconditionFailed:
        logger.warning("Could not deny request %s for slot %s: changed concurrently", request_id, claim.slot_id)
        return False
    slot_events.emit(
        slot_events.REQUEST_DENIED,
        {"division": claim.division, "slotId": claim.slot_id, "requestId": request_id},
    )
    return True


def sweep_pending(
    session: Session, league_id: str, division: str, slot_id: str, keep_request_id: Optional[str] = None
) -> List[str]:
    """
    Deny every still-Pending claim for a slot except ``keep_request_id``.

    Failures are logged and skipped; returns the request ids actually denied.
    """
    denied: List[str] = []
    for claim in list_claims(session, league_id, division, slot_id):
        if claim.request_id == keep_request_id or claim.status != REQUEST_PENDING:
            continue
        try:
            if deny_claim(session, claim):
                denied.append(claim.request_id)
        except Exception:
            session.rollback()
            logger.exception("Sweep failed for request %s on slot %s", claim.request_id, slot_id)
    if denied:
        logger.info("Denied %d pending request(s) for slot %s", len(denied), slot_id)
    return denied
