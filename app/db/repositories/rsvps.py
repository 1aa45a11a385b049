"""
Attendance record (RSVP) persistence.

These functions stage changes on the session and flush; committing is left to
the caller so admission and promotion can commit as one unit.
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.rsvp import RSVP, RSVPStatusEnum


async def get_user_rsvp_for_event(db: AsyncSession, user_id, event_id) -> Optional[RSVP]:
    """
    Get a user's RSVP for a specific event.
    
    Args:
        db: Database session
        user_id: User's UUID
        event_id: Event's UUID
        
    Returns:
        RSVP object if found, None otherwise
    """
    q = select(RSVP).where(
        RSVP.user_id == user_id,
        RSVP.event_id == event_id
    )
    res = await db.execute(q)
    return res.scalars().first()


async def add_rsvp(db: AsyncSession, user_id, event_id, status: RSVPStatusEnum, guest_count: int = 1) -> RSVP:
    r = RSVP(user_id=user_id, event_id=event_id, status=status, guest_count=guest_count)
    db.add(r)
    await db.flush()
    return r


async def update_rsvp(db: AsyncSession, rsvp: RSVP, status: RSVPStatusEnum, guest_count: int) -> RSVP:
    rsvp.status = status
    rsvp.guest_count = guest_count
    await db.flush()
    return rsvp


async def delete_rsvp(db: AsyncSession, rsvp: RSVP) -> None:
    await db.delete(rsvp)
    await db.flush()
