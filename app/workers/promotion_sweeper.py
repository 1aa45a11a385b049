"""
Scheduled promotion sweep.

Periodically fills free seats for every event that still has a waiting list,
catching capacity freed outside the request path. Each event is promoted in
its own session and under its own lock, so a sweep running alongside a
cancellation for the same event simply waits its turn.
"""
import asyncio
from typing import Callable, Optional
from app.core.config import settings
from app.core.errors import DomainError
from app.core.logging import logger
from app.db.session import AsyncSessionLocal
from app.db.repositories import list_event_ids_with_waiting_list
from app.services.notifications import NotificationDispatcher
from app.services.rsvp_service import RSVPService


async def sweep_once(
    session_factory: Callable = AsyncSessionLocal,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> int:
    """Run one promotion pass over all events with queued users; returns promotions made."""
    async with session_factory() as session:
        event_ids = await list_event_ids_with_waiting_list(session)

    total = 0
    for event_id in event_ids:
        async with session_factory() as session:
            service = RSVPService(session, dispatcher=dispatcher)
            try:
                total += len(await service.promote(event_id))
            except DomainError as e:
                logger.error(f"Promotion sweep failed for event {event_id}: {e}")
    if total:
        logger.info(f"Promotion sweep promoted {total} user(s) across {len(event_ids)} event(s)")
    return total


async def run_sweeper(interval_seconds: Optional[int] = None):
    interval = interval_seconds or settings.PROMOTION_SWEEP_INTERVAL_SECONDS
    logger.info(f"Promotion sweeper started (every {interval}s)")
    while True:
        await asyncio.sleep(interval)
        try:
            await sweep_once()
        except Exception as e:
            logger.exception(f"Promotion sweep crashed: {e}")
