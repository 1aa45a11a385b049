from fastapi import APIRouter, Depends, Query, Request
from app.schemas import RSVPCreate, RSVPOut, WaitingListEntryOut, AdmissionOut, AdmissionKind
from app.db.session import get_session
from app.services.rsvp_service import RSVPService
from app.core.errors import DomainError
from app.api.errors import http_error, to_http
from app.core.rate_limit import limiter
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

router = APIRouter(prefix="/rsvps", tags=["rsvps"])

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)

@router.post("/", response_model=AdmissionOut)
@limiter.limit("20/minute")
async def create_rsvp_endpoint(
    request: Request,
    payload: RSVPCreate,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    RSVP to an event.
    - result "confirmed" / "updated": the RSVP is stored
    - result "waitlisted": the event is full and the user was queued
    """
    result = await rsvp_service.request_rsvp(payload.user_id, payload.event_id, payload.status, payload.guest_count)
    if result.kind is AdmissionKind.failed:
        raise http_error(result.reason, result.message)
    return AdmissionOut(
        result=result.kind,
        message=result.message,
        rsvp=RSVPOut.model_validate(result.rsvp) if result.rsvp is not None else None,
        waiting_list_entry=WaitingListEntryOut.model_validate(result.entry) if result.entry is not None else None,
    )

@router.delete("/{event_id}", status_code=204)
async def cancel_rsvp_endpoint(
    event_id: UUID,
    user_id: UUID = Query(...),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    try:
        await rsvp_service.cancel_rsvp(user_id, event_id)
    except DomainError as e:
        raise to_http(e)
