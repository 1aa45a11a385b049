"""
Promotion engine: moves queued users into freed seats.

One call fills at most `max_attendees - confirmed` seats, strictly in queue
order. Every attendance record, queue removal and in-app notification row of a
call is staged in the caller's transaction, so a batch commits or rolls back
as a whole.
"""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import EventNotFoundError
from app.core.logging import event_logger
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.repositories import get_event, add_rsvp, add_notification
from app.services.capacity import assert_within_capacity, available_spots, confirmed_count
from app.services.notifications import NotificationKind, SPOT_AVAILABLE_TITLE, spot_available_message
from app.services.waiting_list import WaitingListStore

# The queue does not remember the guest count originally requested
PROMOTED_GUEST_COUNT = 1


class PromotionEngine:
    def __init__(self, session: AsyncSession, waiting_list: Optional[WaitingListStore] = None):
        self.session = session
        self.waiting_list = waiting_list or WaitingListStore(session)

    async def promote(self, event_id) -> List[RSVP]:
        """Admit queued users up to the free capacity; returns the new records."""
        log = event_logger(event_id)
        event = await get_event(self.session, event_id, for_update=True)
        if event is None:
            raise EventNotFoundError(event_id)

        confirmed = await confirmed_count(self.session, event_id)
        spots = available_spots(event, confirmed)
        if spots <= 0:
            return []

        entries = await self.waiting_list.head(event_id, spots)
        if not entries:
            return []

        promoted = []
        for entry in entries:
            rsvp = await add_rsvp(
                self.session, entry.user_id, event_id, RSVPStatusEnum.attending, PROMOTED_GUEST_COUNT
            )
            await add_notification(
                self.session,
                entry.user_id,
                event_id,
                NotificationKind.spot_available.value,
                SPOT_AVAILABLE_TITLE,
                spot_available_message(event.title),
            )
            promoted.append(rsvp)
            log.info(f"User {entry.user_id} auto-promoted from waiting list position {entry.priority}")

        await self.waiting_list.remove_entries(event_id, entries)
        assert_within_capacity(event, confirmed + len(promoted))
        return promoted
