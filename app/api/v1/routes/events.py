from fastapi import APIRouter, Depends, HTTPException, Query
from app.schemas import EventCreateRequest, EventOut, WaitingListEntryOut, WaitingListPosition, PromotionOut, RSVPOut
from app.db.session import get_session
from app.services.event_service import EventService
from app.services.rsvp_service import RSVPService
from app.core.errors import DomainError
from app.api.errors import to_http
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

router = APIRouter(prefix="/events", tags=["events"])

def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)

@router.post("/", response_model=EventOut, status_code=201)
async def create_event_endpoint(
    payload: EventCreateRequest,
    event_service: EventService = Depends(get_event_service)
):
    try:
        return await event_service.create_event(payload, payload.created_by)
    except DomainError as e:
        raise to_http(e)

@router.get("/{event_id}", response_model=EventOut)
async def get_event_detail(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service)
):
    """Event detail with live confirmed count, free seats and queue length."""
    ev = await event_service.get_event(event_id)
    if not ev:
        raise HTTPException(status_code=404, detail="Event not found")
    return ev

@router.delete("/{event_id}", status_code=204)
async def delete_event_endpoint(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service)
):
    try:
        await event_service.delete_event(event_id)
    except DomainError as e:
        raise to_http(e)

@router.get("/{event_id}/waitlist", response_model=List[WaitingListEntryOut])
async def list_waiting_list(
    event_id: UUID,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    try:
        return await rsvp_service.list_waiting_list(event_id)
    except DomainError as e:
        raise to_http(e)

@router.get("/{event_id}/waitlist/position", response_model=WaitingListPosition)
async def waiting_list_position(
    event_id: UUID,
    user_id: UUID = Query(..., description="User whose position to look up"),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    Position of a user in the event's waiting list.
    - position: 1 is next in line; -1 means the user is not queued
    """
    position = await rsvp_service.position_of(user_id, event_id)
    return WaitingListPosition(user_id=user_id, event_id=event_id, position=position)

@router.delete("/{event_id}/waitlist", status_code=204)
async def leave_waiting_list(
    event_id: UUID,
    user_id: UUID = Query(...),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    try:
        await rsvp_service.leave_waiting_list(user_id, event_id)
    except DomainError as e:
        raise to_http(e)

@router.post("/{event_id}/waitlist/promote", response_model=PromotionOut)
async def promote_waiting_list(
    event_id: UUID,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    try:
        promoted = await rsvp_service.promote(event_id)
    except DomainError as e:
        raise to_http(e)
    return PromotionOut(event_id=event_id, promoted=[RSVPOut.model_validate(r) for r in promoted])
