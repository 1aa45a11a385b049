"""
Admission controller: decides whether an RSVP is confirmed or queued.

Runs inside the caller's transaction and under the event's lock. It never
dispatches notifications; the returned AdmissionResult carries the record or
queue entry so the caller can.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import (
    AlreadyWaitlistedError,
    DomainError,
    ErrorCode,
    EventNotFoundError,
    UserNotFoundError,
)
from app.core.logging import event_logger
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.models.waiting_list import WaitingListEntry
from app.db.repositories import (
    get_event,
    get_user,
    get_user_rsvp_for_event,
    add_rsvp,
    update_rsvp,
    delete_rsvp,
)
from app.schemas import AdmissionKind
from app.services.capacity import assert_within_capacity, confirmed_count, has_capacity
from app.services.waiting_list import WaitingListStore


@dataclass
class AdmissionResult:
    kind: AdmissionKind
    rsvp: Optional[RSVP] = None
    entry: Optional[WaitingListEntry] = None
    reason: Optional[ErrorCode] = None
    message: str = ""
    # True when an update moved an attending record off the attendee list
    released_seat: bool = False

    @classmethod
    def confirmed(cls, rsvp: RSVP) -> "AdmissionResult":
        return cls(AdmissionKind.confirmed, rsvp=rsvp, message="Your RSVP has been confirmed!")

    @classmethod
    def waitlisted(cls, entry: WaitingListEntry) -> "AdmissionResult":
        return cls(
            AdmissionKind.waitlisted,
            entry=entry,
            message="Event is at full capacity. You've been added to the waiting list.",
        )

    @classmethod
    def updated(cls, rsvp: RSVP, released_seat: bool = False) -> "AdmissionResult":
        return cls(AdmissionKind.updated, rsvp=rsvp, message="Your RSVP has been updated.", released_seat=released_seat)

    @classmethod
    def failed(cls, error: DomainError) -> "AdmissionResult":
        return cls(AdmissionKind.failed, reason=error.code, message=error.message)

    @property
    def ok(self) -> bool:
        return self.kind is not AdmissionKind.failed


class AdmissionController:
    def __init__(self, session: AsyncSession, waiting_list: Optional[WaitingListStore] = None):
        self.session = session
        self.waiting_list = waiting_list or WaitingListStore(session)

    async def request_rsvp(self, user_id, event_id, status: RSVPStatusEnum, guest_count: int = 1) -> AdmissionResult:
        log = event_logger(event_id)
        event = await get_event(self.session, event_id, for_update=True)
        if event is None:
            return AdmissionResult.failed(EventNotFoundError(event_id))
        if await get_user(self.session, user_id) is None:
            return AdmissionResult.failed(UserNotFoundError(user_id))

        existing = await get_user_rsvp_for_event(self.session, user_id, event_id)
        if existing is not None:
            return await self._update_existing(event, existing, status, guest_count)

        if status != RSVPStatusEnum.attending:
            # Declining or "maybe" never takes a seat, and ends any queue membership
            rsvp = await add_rsvp(self.session, user_id, event_id, status, guest_count)
            await self.waiting_list.discard(user_id, event_id)
            log.info(f"User {user_id} RSVP'd with status: {status.value}")
            return AdmissionResult.confirmed(rsvp)

        confirmed = await confirmed_count(self.session, event_id)
        if has_capacity(event, confirmed):
            rsvp = await self._admit(event, user_id, guest_count, confirmed)
            return AdmissionResult.confirmed(rsvp)

        try:
            entry = await self.waiting_list.enqueue(user_id, event_id)
        except AlreadyWaitlistedError as e:
            log.info(f"User {user_id} is already on the waiting list")
            return AdmissionResult.failed(e)
        return AdmissionResult.waitlisted(entry)

    async def _admit(self, event, user_id, guest_count: int, confirmed: int) -> RSVP:
        rsvp = await add_rsvp(self.session, user_id, event.id, RSVPStatusEnum.attending, guest_count)
        await self.waiting_list.discard(user_id, event.id)
        assert_within_capacity(event, confirmed + 1)
        event_logger(event.id).info(f"User {user_id} admitted ({confirmed + 1}/{event.max_attendees})")
        return rsvp

    async def _update_existing(self, event, rsvp: RSVP, status: RSVPStatusEnum, guest_count: int) -> AdmissionResult:
        was_attending = rsvp.status == RSVPStatusEnum.attending
        if status == RSVPStatusEnum.attending and not was_attending:
            # Upgrading to attending needs a seat like any new attendee
            confirmed = await confirmed_count(self.session, event.id)
            if not has_capacity(event, confirmed):
                user_id = rsvp.user_id
                await delete_rsvp(self.session, rsvp)
                entry = await self.waiting_list.enqueue(user_id, event.id)
                return AdmissionResult.waitlisted(entry)
            assert_within_capacity(event, confirmed + 1)

        await update_rsvp(self.session, rsvp, status, guest_count)
        event_logger(event.id).info(f"User {rsvp.user_id} updated RSVP to status: {status.value}")
        return AdmissionResult.updated(
            rsvp, released_seat=was_attending and status != RSVPStatusEnum.attending
        )
