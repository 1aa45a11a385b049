"""
Waiting list store.

An ordered queue per event. Positions (priorities) are assigned append-only
as max + 1 and kept dense on removal. Callers must hold the event's lock and
own the transaction; nothing here commits.
"""
from typing import List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import AlreadyWaitlistedError, WaitlistEntryNotFoundError
from app.core.logging import event_logger
from app.db.models.waiting_list import WaitingListEntry
from app.db.repositories import (
    get_entry,
    get_max_priority,
    add_entry,
    list_entries,
    delete_entries_and_reindex,
)

NOT_ON_WAITING_LIST = -1


class WaitingListStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def enqueue(self, user_id, event_id) -> WaitingListEntry:
        """Append the user to the event's queue. Raises AlreadyWaitlistedError."""
        if await get_entry(self.session, user_id, event_id) is not None:
            raise AlreadyWaitlistedError(user_id, event_id)
        priority = await get_max_priority(self.session, event_id) + 1
        entry = await add_entry(self.session, user_id, event_id, priority)
        event_logger(event_id).info(f"User {user_id} added to waiting list at position {priority}")
        return entry

    async def dequeue(self, user_id, event_id) -> WaitingListEntry:
        """Remove the user and close the gap. Raises WaitlistEntryNotFoundError."""
        entry = await get_entry(self.session, user_id, event_id)
        if entry is None:
            raise WaitlistEntryNotFoundError(user_id, event_id)
        await delete_entries_and_reindex(self.session, event_id, [entry])
        event_logger(event_id).info(f"User {user_id} removed from waiting list")
        return entry

    async def discard(self, user_id, event_id) -> bool:
        """Dequeue if present; True when an entry was removed."""
        try:
            await self.dequeue(user_id, event_id)
        except WaitlistEntryNotFoundError:
            return False
        return True

    async def remove_entries(self, event_id, entries: Sequence[WaitingListEntry]) -> None:
        await delete_entries_and_reindex(self.session, event_id, entries)

    async def position_of(self, user_id, event_id) -> int:
        entry = await get_entry(self.session, user_id, event_id)
        return entry.priority if entry is not None else NOT_ON_WAITING_LIST

    async def list_for_event(self, event_id) -> List[WaitingListEntry]:
        return await list_entries(self.session, event_id)

    async def head(self, event_id, limit: int) -> List[WaitingListEntry]:
        """The first `limit` entries in queue order."""
        if limit <= 0:
            return []
        return await list_entries(self.session, event_id, limit=limit)
