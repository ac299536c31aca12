"""
Slot Request API Routes
Direct-confirm claims, claim listing and legacy approval.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from slotswap.database import get_session
from slotswap.services import slot_requests, slot_store
from slotswap.services.approval_workflow import approve_request
from slotswap.services.claim_workflow import claim_slot
from slotswap.utils.caller import Caller, get_caller

router = APIRouter()


class ClaimRequest(BaseModel):
    notes: Optional[str] = None


class ApproveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    approved_by_email: Optional[str] = Field(default=None, alias="approvedByEmail")


@router.post("/slots/{division}/{slot_id}/requests", status_code=201)
def create_slot_request(
    division: str,
    slot_id: str,
    request: Optional[ClaimRequest] = Body(default=None),
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """
    Claim an Open slot for the caller's team.

    Accepting a slot confirms it immediately; there is no approval step.
    """
    notes = request.notes if request else None
    return {"data": claim_slot(session, caller, division, slot_id, notes=notes)}


@router.get("/slots/{division}/{slot_id}/requests")
def get_slot_requests(
    division: str,
    slot_id: str,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    caller.require_member()
    slot = slot_store.load_slot(session, caller.league_id, division, slot_id).row
    claims = slot_requests.list_claims(session, slot.league_id or caller.league_id, slot.division, slot.slot_id)
    return {"data": [slot_requests.claim_to_dict(c) for c in claims]}


@router.patch("/slots/{division}/{slot_id}/requests/{request_id}/approve")
def approve_slot_request(
    division: str,
    slot_id: str,
    request_id: str,
    request: Optional[ApproveRequest] = Body(default=None),
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """Legacy: approve one Pending claim and deny the rest."""
    approved_by = request.approved_by_email if request else None
    return {"data": approve_request(session, caller, division, slot_id, request_id, approved_by)}
