"""Database models package."""
from app.db.models.user import User
from app.db.models.event import Event
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.models.waiting_list import WaitingListEntry
from app.db.models.notification import Notification

__all__ = ["User", "Event", "RSVP", "RSVPStatusEnum", "WaitingListEntry", "Notification"]
