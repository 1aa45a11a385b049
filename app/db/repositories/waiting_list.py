"""
Waiting list persistence.

Priorities are kept dense (1..N per event). Removal renumbers the tail in two
phases: the tail is first negated, then written back with its new positive
values, so the (event_id, priority) unique constraint is never violated by
an intermediate row.
"""
from typing import List, Optional, Sequence
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.waiting_list import WaitingListEntry


async def get_entry(db: AsyncSession, user_id, event_id) -> Optional[WaitingListEntry]:
    q = select(WaitingListEntry).where(
        WaitingListEntry.user_id == user_id,
        WaitingListEntry.event_id == event_id,
    )
    res = await db.execute(q)
    return res.scalars().first()


async def get_max_priority(db: AsyncSession, event_id) -> int:
    """Highest priority in use for the event, 0 when the queue is empty."""
    q = select(func.max(WaitingListEntry.priority)).where(WaitingListEntry.event_id == event_id)
    res = await db.execute(q)
    return res.scalar() or 0


async def add_entry(db: AsyncSession, user_id, event_id, priority: int) -> WaitingListEntry:
    entry = WaitingListEntry(user_id=user_id, event_id=event_id, priority=priority)
    db.add(entry)
    await db.flush()
    await db.refresh(entry)
    return entry


async def list_entries(db: AsyncSession, event_id, limit: Optional[int] = None) -> List[WaitingListEntry]:
    """Entries for an event in queue order, optionally only the first `limit`."""
    q = (
        select(WaitingListEntry)
        .where(WaitingListEntry.event_id == event_id)
        .order_by(WaitingListEntry.priority)
    )
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return list(res.scalars().all())


async def delete_entries_and_reindex(db: AsyncSession, event_id, entries: Sequence[WaitingListEntry]) -> None:
    """
    Remove `entries` (all from `event_id`) and close the gaps they leave.

    Every surviving entry behind the first removed one moves up by the number
    of removed entries ahead of it; relative order is preserved.
    """
    if not entries:
        return
    lowest = min(e.priority for e in entries)
    for entry in entries:
        await db.delete(entry)
    await db.flush()

    await db.execute(
        update(WaitingListEntry)
        .where(WaitingListEntry.event_id == event_id, WaitingListEntry.priority > lowest)
        .values(priority=-WaitingListEntry.priority)
        .execution_options(synchronize_session="fetch")
    )
    tail = await db.execute(
        select(WaitingListEntry.id)
        .where(WaitingListEntry.event_id == event_id, WaitingListEntry.priority < 0)
        .order_by(WaitingListEntry.priority.desc())
    )
    for offset, entry_id in enumerate(tail.scalars().all()):
        await db.execute(
            update(WaitingListEntry)
            .where(WaitingListEntry.id == entry_id)
            .values(priority=lowest + offset)
            .execution_options(synchronize_session="fetch")
        )


async def mark_notified(db: AsyncSession, entry_id) -> None:
    await db.execute(
        update(WaitingListEntry)
        .where(WaitingListEntry.id == entry_id)
        .values(notified=True)
        .execution_options(synchronize_session="fetch")
    )
