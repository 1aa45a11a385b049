"""Persisted in-app notifications."""
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.notification import Notification


async def add_notification(db: AsyncSession, user_id, event_id, kind: str, title: str, message: str) -> Notification:
    n = Notification(user_id=user_id, event_id=event_id, kind=kind, title=title, message=message)
    db.add(n)
    await db.flush()
    return n


async def list_notifications_for_user(db: AsyncSession, user_id, unread_only: bool = False) -> List[Notification]:
    q = select(Notification).where(Notification.user_id == user_id).order_by(Notification.created_at.desc())
    if unread_only:
        q = q.where(Notification.is_read.is_(False))
    res = await db.execute(q)
    return list(res.scalars().all())
