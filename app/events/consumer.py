"""
Notification worker.

Consumes waiting-list and RSVP messages, stores the in-app notification where
the producer did not already, and pushes it to the user's open WebSockets.
"""
import asyncio, json
from typing import Callable
from uuid import UUID
from aio_pika import connect_robust, ExchangeType
from app.core.config import settings
from app.core.logging import logger
from app.websocket.manager import manager
from app.db.session import AsyncSessionLocal
from app.db.repositories import add_notification, get_event
from app.events.publisher import EXCHANGE_NAME

QUEUE_NAME = "eventhub.user-notifications"
BINDINGS = ("waitlist.*", "rsvp.*")

TITLES = {
    "waitlist.joined": "Added to Waiting List",
    "rsvp.confirmed": "RSVP Confirmed",
}


def _message_for(typ: str, data: dict, event_title: str) -> str:
    if typ == "waitlist.joined":
        return f"{event_title} is full. You are number {data.get('position')} on the waiting list."
    if typ == "rsvp.confirmed":
        return f"Your RSVP for {event_title} has been confirmed."
    return data.get("message") or ""


async def handle_message(body: bytes, session_factory: Callable = AsyncSessionLocal) -> dict:
    data = json.loads(body.decode())
    typ = data.get("type")
    user_id = UUID(data["user_id"])
    event_id = UUID(data["event_id"])
    async with session_factory() as session:
        ev = await get_event(session, event_id)
        title = ev.title if ev else data.get("event_title", "")
        # Promotions are stored in the same transaction that admits the user
        if typ in TITLES and ev is not None:
            await add_notification(session, user_id, event_id, data.get("kind", typ), TITLES[typ], _message_for(typ, data, title))
            await session.commit()
    payload = {
        "type": typ,
        "event_id": str(event_id),
        "event_title": title,
        "message": _message_for(typ, data, title),
    }
    if typ == "waitlist.joined":
        payload["position"] = data.get("position")
    await manager.send_personal_message(user_id, payload)
    return payload


async def run_worker():
    max_retries = 10
    delay = 5  # seconds
    for attempt in range(1, max_retries + 1):
        try:
            connection = await connect_robust(settings.RABBITMQ_URL)
            logger.info("Successfully connected to RabbitMQ")
            break
        except Exception as e:
            logger.error(f"RabbitMQ connection failed (attempt {attempt}/{max_retries}): {e}")
            if attempt == max_retries:
                raise
            await asyncio.sleep(delay)
    channel = await connection.channel()
    exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    queue = await channel.declare_queue(QUEUE_NAME, durable=True)
    for routing_key in BINDINGS:
        await queue.bind(exchange, routing_key=routing_key)
    async with queue.iterator() as queue_iter:
        async for message in queue_iter:
            async with message.process():
                try:
                    await handle_message(message.body)
                except Exception as e:
                    logger.exception(f"Error handling message: {e}")
