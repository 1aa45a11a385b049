"""
Capacity ledger: confirmed attendance against an event's maximum.

Only `attending` records count. `guest_count` is informational and never
consumes seats.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import CapacityInvariantViolation
from app.db.models.event import Event
from app.db.repositories import get_event_rsvp_count


async def confirmed_count(db: AsyncSession, event_id) -> int:
    return await get_event_rsvp_count(db, event_id)


def available_spots(event: Event, confirmed: int) -> int:
    """Free seats; a non-positive maximum means the event only queues."""
    if event.max_attendees is None or event.max_attendees <= 0:
        return 0
    return max(0, event.max_attendees - confirmed)


def has_capacity(event: Event, confirmed: int) -> bool:
    return available_spots(event, confirmed) > 0


def assert_within_capacity(event: Event, confirmed: int) -> None:
    if confirmed > max(event.max_attendees or 0, 0):
        raise CapacityInvariantViolation(event.id, confirmed, event.max_attendees)
