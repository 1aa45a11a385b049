"""
RSVP and waiting-list service used by the API and the promotion sweeper.

Each mutating call takes the event's lock, runs the admission or promotion
logic in one transaction, commits, and only then sends notifications.
"""
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.cache.redis_client import cache
from app.core.errors import (
    CapacityInvariantViolation,
    ErrorCode,
    EventNotFoundError,
    PromotionError,
    RSVPNotFoundError,
)
from app.core.logging import event_logger
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.models.waiting_list import WaitingListEntry
from app.db.repositories import (
    get_event,
    get_user_rsvp_for_event,
    delete_rsvp,
    mark_notified,
)
from app.schemas import AdmissionKind
from app.services.admission import AdmissionController, AdmissionResult
from app.services.locks import EventLockRegistry, event_locks
from app.services.notifications import (
    NotificationDispatcher,
    NotificationKind,
    dispatch_safely,
    get_dispatcher,
    spot_available_message,
)
from app.services.promotion import PromotionEngine
from app.services.waiting_list import WaitingListStore


class RSVPService:
    def __init__(
        self,
        session: AsyncSession,
        dispatcher: Optional[NotificationDispatcher] = None,
        locks: Optional[EventLockRegistry] = None,
    ):
        self.session = session
        self.dispatcher = dispatcher or get_dispatcher()
        self.locks = locks or event_locks
        self.waiting_list = WaitingListStore(session)
        self.admission = AdmissionController(session, self.waiting_list)
        self.promotion = PromotionEngine(session, self.waiting_list)

    async def request_rsvp(
        self,
        user_id,
        event_id,
        status: RSVPStatusEnum = RSVPStatusEnum.attending,
        guest_count: int = 1,
    ) -> AdmissionResult:
        """
        Confirm, queue or update a user's RSVP.

        Over-capacity requests are queued, not rejected. Persistence failures
        roll back and come back as a `failed` result with PERSISTENCE_ERROR.
        """
        log = event_logger(event_id)
        async with self.locks.acquire(event_id):
            try:
                result = await self.admission.request_rsvp(user_id, event_id, status, guest_count)
                if not result.ok:
                    await self.session.rollback()
                    return result
                await self.session.commit()
            except CapacityInvariantViolation:
                await self.session.rollback()
                log.critical(f"Capacity invariant violated while admitting user {user_id}")
                raise
            except SQLAlchemyError as e:
                await self.session.rollback()
                log.opt(exception=e).error(f"Error processing RSVP for user {user_id}: {e}")
                return AdmissionResult(
                    AdmissionKind.failed,
                    reason=ErrorCode.PERSISTENCE_ERROR,
                    message="Your RSVP could not be saved. Please try again.",
                )

        await cache.invalidate_event(event_id)
        await self._notify_admission(user_id, event_id, result)
        if result.released_seat and not await self._fill_released_seats(event_id):
            # the failed promotion rolled back and expired the committed record
            await self.session.refresh(result.rsvp)
        return result

    async def cancel_rsvp(self, user_id, event_id) -> None:
        """Delete the user's RSVP, then fill any freed seat from the queue."""
        async with self.locks.acquire(event_id):
            try:
                rsvp = await get_user_rsvp_for_event(self.session, user_id, event_id)
                if rsvp is None:
                    raise RSVPNotFoundError(user_id, event_id)
                await delete_rsvp(self.session, rsvp)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            event_logger(event_id).info(f"User {user_id} cancelled RSVP")

        await cache.invalidate_event(event_id)
        await self._fill_released_seats(event_id)

    async def leave_waiting_list(self, user_id, event_id) -> None:
        async with self.locks.acquire(event_id):
            try:
                await self.waiting_list.dequeue(user_id, event_id)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
        await cache.invalidate_event(event_id)

    async def promote(self, event_id) -> List[RSVP]:
        """
        Promote queued users into free seats.

        The whole batch commits or none of it does. Notifications go out
        afterwards; one user's delivery failure does not affect the others.
        """
        log = event_logger(event_id)
        async with self.locks.acquire(event_id):
            try:
                promoted = await self.promotion.promote(event_id)
                # also ends an empty pass; a rollback would expire the caller's records
                await self.session.commit()
            except EventNotFoundError:
                await self.session.rollback()
                raise
            except (SQLAlchemyError, CapacityInvariantViolation) as e:
                await self.session.rollback()
                log.opt(exception=e).error(f"Error auto-promoting from waiting list: {e}")
                raise PromotionError(event_id) from e

        if not promoted:
            return []
        await cache.invalidate_event(event_id)
        event = await get_event(self.session, event_id)
        title = event.title if event is not None else ""
        for rsvp in promoted:
            await dispatch_safely(
                self.dispatcher,
                rsvp.user_id,
                event_id,
                NotificationKind.spot_available,
                {"event_title": title, "message": spot_available_message(title)},
            )
        log.info(f"Promoted {len(promoted)} user(s) from the waiting list")
        return promoted

    async def _fill_released_seats(self, event_id) -> bool:
        """
        Promotion that follows an already committed release of a seat.

        A failure here is logged and left to the promotion sweep; it never
        turns the committed change into an error. Returns False on failure.
        """
        try:
            await self.promote(event_id)
        except PromotionError as e:
            event_logger(event_id).warning(f"Seat released but not refilled, leaving it to the sweep: {e}")
            return False
        return True

    async def position_of(self, user_id, event_id) -> int:
        """Queue position of the user, or -1 when not queued."""
        return await self.waiting_list.position_of(user_id, event_id)

    async def list_waiting_list(self, event_id) -> List[WaitingListEntry]:
        if await get_event(self.session, event_id) is None:
            raise EventNotFoundError(event_id)
        return await self.waiting_list.list_for_event(event_id)

    async def _notify_admission(self, user_id, event_id, result: AdmissionResult) -> None:
        if result.kind is AdmissionKind.confirmed:
            await dispatch_safely(
                self.dispatcher, user_id, event_id, NotificationKind.rsvp_confirmed,
                {"status": result.rsvp.status.value, "guest_count": result.rsvp.guest_count},
            )
        elif result.kind is AdmissionKind.waitlisted:
            delivered = await dispatch_safely(
                self.dispatcher, user_id, event_id, NotificationKind.waitlisted,
                {"position": result.entry.priority},
            )
            if not delivered:
                return
            async with self.locks.acquire(event_id):
                try:
                    await mark_notified(self.session, result.entry.id)
                    await self.session.commit()
                except SQLAlchemyError as e:
                    await self.session.rollback()
                    event_logger(event_id).warning(f"Could not mark waiting list entry notified for user {user_id}: {e}")
