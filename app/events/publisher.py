import json
import asyncio
from typing import Optional
from aio_pika import connect_robust, Message, ExchangeType, DeliveryMode
from aio_pika.abc import AbstractRobustConnection, AbstractChannel
from app.core.config import settings

EXCHANGE_NAME = "eventhub.notifications"

_connection: Optional[AbstractRobustConnection] = None
_channel: Optional[AbstractChannel] = None
_lock = asyncio.Lock()


async def get_rabbit_channel() -> AbstractChannel:
    global _connection, _channel
    async with _lock:
        if _connection is None or _connection.is_closed:
            _connection = await connect_robust(settings.RABBITMQ_URL)
            _channel = await _connection.channel()
    return _channel


async def publish_event(routing_key: str, payload: dict):
    """Publish a persistent JSON message on the notifications exchange."""
    channel = await get_rabbit_channel()
    exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    body = json.dumps(payload, default=str).encode()
    message = Message(body, content_type="application/json", delivery_mode=DeliveryMode.PERSISTENT)
    await exchange.publish(message, routing_key=routing_key)


async def close_connection():
    global _connection, _channel
    if _connection is not None and not _connection.is_closed:
        await _connection.close()
    _connection = None
    _channel = None
