from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import EventCreate
from app.db.repositories import (
    create_event as db_create_event,
    get_event_summary as db_get_event_summary,
    delete_event as db_delete_event,
    get_user as db_get_user,
)
from app.core.errors import EventNotFoundError, UserNotFoundError
from app.core.logging import event_logger
from app.services.locks import event_locks
from typing import Optional


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate, user_id) -> dict:
        if await db_get_user(self.session, user_id) is None:
            raise UserNotFoundError(user_id)
        event = await db_create_event(self.session, payload, user_id)
        event_logger(event.id).info(f"Event created by {user_id} with {event.max_attendees} seats")
        return await db_get_event_summary(self.session, event.id)

    async def get_event(self, event_id) -> Optional[dict]:
        return await db_get_event_summary(self.session, event_id)

    async def delete_event(self, event_id) -> None:
        """Delete an event together with its attendance records and waiting list."""
        async with event_locks.acquire(event_id):
            if not await db_delete_event(self.session, event_id):
                raise EventNotFoundError(event_id)
        event_logger(event_id).info("Event deleted")
