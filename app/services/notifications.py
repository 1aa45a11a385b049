"""
Notification dispatch for admission and promotion outcomes.

Dispatch happens after the triggering transaction has committed. A failure is
logged and reported to the caller as `False`; it never undoes an admission or
promotion.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional
from app.core.config import settings
from app.core.errors import DispatchFailure
from app.core.logging import event_logger
from app.events import publisher


class NotificationKind(str, Enum):
    spot_available = "spot_available"
    waitlisted = "waitlisted"
    rsvp_confirmed = "rsvp_confirmed"


ROUTING_KEYS = {
    NotificationKind.spot_available: "waitlist.spot_available",
    NotificationKind.waitlisted: "waitlist.joined",
    NotificationKind.rsvp_confirmed: "rsvp.confirmed",
}

SPOT_AVAILABLE_TITLE = "Spot Available!"


def spot_available_message(event_title: str) -> str:
    return (
        f"A spot has opened up for {event_title}. "
        "You've been automatically promoted from the waiting list!"
    )


class NotificationDispatcher(ABC):
    """Interface for delivering notifications to users."""

    @abstractmethod
    async def notify(self, user_id, event_id, kind: NotificationKind, payload: dict) -> None:
        """Deliver one notification. Raises DispatchFailure on error."""
        ...


class QueueNotificationDispatcher(NotificationDispatcher):
    """Publishes notifications to the RabbitMQ topic exchange."""

    async def notify(self, user_id, event_id, kind: NotificationKind, payload: dict) -> None:
        message = {
            "type": ROUTING_KEYS[kind],
            "kind": kind.value,
            "user_id": str(user_id),
            "event_id": str(event_id),
            **payload,
        }
        try:
            await publisher.publish_event(ROUTING_KEYS[kind], message)
        except Exception as e:
            raise DispatchFailure(user_id, kind.value, e) from e


class NullNotificationDispatcher(NotificationDispatcher):
    """Used when messaging is disabled; only logs."""

    async def notify(self, user_id, event_id, kind: NotificationKind, payload: dict) -> None:
        event_logger(event_id).debug(f"Notifications disabled, dropping {kind.value} for user {user_id}")


def get_dispatcher() -> NotificationDispatcher:
    if settings.NOTIFICATIONS_ENABLED:
        return QueueNotificationDispatcher()
    return NullNotificationDispatcher()


async def dispatch_safely(
    dispatcher: NotificationDispatcher,
    user_id,
    event_id,
    kind: NotificationKind,
    payload: Optional[dict] = None,
) -> bool:
    """Send one notification, logging instead of raising on failure."""
    try:
        await dispatcher.notify(user_id, event_id, kind, payload or {})
        return True
    except Exception as e:
        event_logger(event_id).opt(exception=e).error(
            f"Failed to dispatch {kind.value} notification to user {user_id}: {e}"
        )
        return False
