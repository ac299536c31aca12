"""
Slot API Routes
Create, list, read, patch, cancel and reconcile game slots.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from slotswap.database import get_session
from slotswap.services import slot_store
from slotswap.services.confirmation import reconcile_slot
from slotswap.utils.caller import Caller, get_caller

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class SlotCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    division: Optional[str] = None
    offering_team_id: Optional[str] = Field(default=None, alias="offeringTeamId")
    offering_email: Optional[str] = Field(default=None, alias="offeringEmail")
    game_date: Optional[str] = Field(default=None, alias="gameDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    field_key: Optional[str] = Field(default=None, alias="fieldKey")
    game_type: Optional[str] = Field(default=None, alias="gameType")
    notes: Optional[str] = None


class SlotPatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_date: Optional[str] = Field(default=None, alias="gameDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    field_key: Optional[str] = Field(default=None, alias="fieldKey")
    game_type: Optional[str] = Field(default=None, alias="gameType")
    notes: Optional[str] = None


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/slots", status_code=201)
def create_slot(
    request: SlotCreateRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """Offer a new Open slot. Coaches may only offer for their own team and division."""
    slot = slot_store.create_slot(
        session,
        caller,
        division=request.division,
        offering_team_id=request.offering_team_id,
        game_date=request.game_date,
        start_time=request.start_time,
        end_time=request.end_time,
        field_key=request.field_key,
        game_type=request.game_type,
        notes=request.notes,
        offering_email=request.offering_email,
    )
    return {"data": slot_store.slot_to_dict(slot)}


@router.get("/slots")
def list_slots(
    division: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """
    List slots in the caller's league.

    With no status filter, Cancelled slots are left out.
    """
    caller.require_member()
    slots = slot_store.list_slots(
        session, caller.league_id, division=division, status=status, date_from=date_from, date_to=date_to
    )
    return {"data": [slot_store.slot_to_dict(s, caller.league_id) for s in slots]}


@router.get("/slots/{division}/{slot_id}")
def get_slot(
    division: str,
    slot_id: str,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    caller.require_member()
    slot = slot_store.load_slot(session, caller.league_id, division, slot_id).row
    return {"data": slot_store.slot_to_dict(slot, caller.league_id)}


@router.patch("/slots/{division}/{slot_id}")
def patch_slot(
    division: str,
    slot_id: str,
    request: SlotPatchRequest,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """Update an Open slot's date, times, field, game type or notes."""
    changes = {
        "gameDate": request.game_date,
        "startTime": request.start_time,
        "endTime": request.end_time,
        "fieldKey": request.field_key,
        "gameType": request.game_type,
        "notes": request.notes,
    }
    slot = slot_store.patch_slot(session, caller, division, slot_id, changes)
    return {"data": slot_store.slot_to_dict(slot, caller.league_id)}


@router.patch("/slots/{division}/{slot_id}/cancel")
def cancel_slot(
    division: str,
    slot_id: str,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    slot = slot_store.cancel_slot(session, caller, division, slot_id)
    return {"data": {"ok": True, "status": slot.status}}


@router.post("/slots/{division}/{slot_id}/reconcile")
def reconcile(
    division: str,
    slot_id: str,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
):
    """Admin repair for slots whose claims disagree with the slot row."""
    return {"data": reconcile_slot(session, caller, division, slot_id)}
