"""
Event persistence.

`get_event` returns the ORM row for services; `get_event_summary` returns the
cached dict the API serves, including live capacity figures.
"""
from typing import Optional
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.event import Event
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.models.waiting_list import WaitingListEntry
from app.schemas import EventCreate
from app.cache.cache_decorators import cached
from app.cache.redis_client import cache
from app.core.config import settings


async def create_event(db: AsyncSession, payload: EventCreate, creator_id) -> Event:
    """
    Create a new event.
    
    Args:
        db: Database session
        payload: Event creation data
        creator_id: UUID of user creating the event
        
    Returns:
        Created Event object
    """
    ev = Event(**payload.model_dump(exclude={"created_by"}), created_by=creator_id)
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def get_event(db: AsyncSession, event_id, for_update: bool = False) -> Optional[Event]:
    """
    Fetch an event row.

    With `for_update`, PostgreSQL takes a row lock held until the surrounding
    transaction ends, serializing capacity changes across processes.
    """
    q = select(Event).where(Event.id == event_id)
    if for_update and settings.is_postgres:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def get_event_rsvp_count(db: AsyncSession, event_id) -> int:
    """Get the count of confirmed RSVPs (attending) for an event."""
    q = select(func.count(RSVP.id)).where(
        RSVP.event_id == event_id,
        RSVP.status == RSVPStatusEnum.attending
    )
    res = await db.execute(q)
    return res.scalar() or 0


async def get_waiting_list_length(db: AsyncSession, event_id) -> int:
    q = select(func.count(WaitingListEntry.id)).where(WaitingListEntry.event_id == event_id)
    res = await db.execute(q)
    return res.scalar() or 0


@cached(lambda db, event_id: f"events:detail:{event_id}", expire=300)
async def get_event_summary(db: AsyncSession, event_id) -> Optional[dict]:
    ev = await get_event(db, event_id)
    if ev is None:
        return None
    confirmed = await get_event_rsvp_count(db, ev.id)
    return {
        'id': str(ev.id),
        'title': ev.title,
        'description': ev.description,
        'location': ev.location,
        'starts_at': ev.starts_at.isoformat() if ev.starts_at else None,
        'max_attendees': ev.max_attendees,
        'created_by': str(ev.created_by),
        'created_at': ev.created_at.isoformat() if ev.created_at else None,
        'confirmed_count': confirmed,
        'available_spots': max(0, ev.max_attendees - confirmed),
        'waiting_list_length': await get_waiting_list_length(db, ev.id),
    }


async def delete_event(db: AsyncSession, event_id) -> bool:
    """Delete an event; its RSVPs, queue entries and notifications cascade."""
    ev = await get_event(db, event_id)
    if ev is None:
        return False
    await db.delete(ev)
    await db.commit()
    await cache.delete(f"events:detail:{event_id}")
    return True


async def list_event_ids_with_waiting_list(db: AsyncSession) -> list:
    """Ids of events that currently have at least one queued user."""
    q = select(WaitingListEntry.event_id).distinct()
    res = await db.execute(q)
    return list(res.scalars().all())
