"""
Repository layer for database operations.

Async functions over an `AsyncSession` for users, events, attendance records,
waiting list entries and notifications. Functions that mutate capacity state
flush but do not commit; the calling service owns the transaction.
"""
from app.db.repositories.users import create_user, get_user
from app.db.repositories.events import (
    create_event,
    get_event,
    get_event_summary,
    get_event_rsvp_count,
    get_waiting_list_length,
    delete_event,
    list_event_ids_with_waiting_list,
)
from app.db.repositories.rsvps import (
    get_user_rsvp_for_event,
    add_rsvp,
    update_rsvp,
    delete_rsvp,
)
from app.db.repositories.waiting_list import (
    get_entry,
    get_max_priority,
    add_entry,
    list_entries,
    delete_entries_and_reindex,
    mark_notified,
)
from app.db.repositories.notifications import add_notification, list_notifications_for_user

__all__ = [
    "create_user", "get_user",
    "create_event", "get_event", "get_event_summary", "get_event_rsvp_count",
    "get_waiting_list_length", "delete_event", "list_event_ids_with_waiting_list",
    "get_user_rsvp_for_event", "add_rsvp", "update_rsvp", "delete_rsvp",
    "get_entry", "get_max_priority", "add_entry", "list_entries",
    "delete_entries_and_reindex", "mark_notified",
    "add_notification", "list_notifications_for_user",
]
