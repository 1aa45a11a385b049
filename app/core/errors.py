"""Domain error codes for RSVP admission and the waiting list."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    RSVP_NOT_FOUND = "RSVP_NOT_FOUND"
    ALREADY_WAITLISTED = "ALREADY_WAITLISTED"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    CAPACITY_INVARIANT_VIOLATION = "CAPACITY_INVARIANT_VIOLATION"
    DISPATCH_FAILURE = "DISPATCH_FAILURE"
    PROMOTION_FAILED = "PROMOTION_FAILED"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class UserNotFoundError(DomainError):
    """Raised when a user is not found."""

    def __init__(self, user_id) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="User not found")
        self.user_id = user_id


class RSVPNotFoundError(DomainError):
    """Raised when cancelling an RSVP that does not exist."""

    def __init__(self, user_id, event_id) -> None:
        super().__init__(
            code=ErrorCode.RSVP_NOT_FOUND,
            message="You have not RSVP'd to this event",
        )
        self.user_id = user_id
        self.event_id = event_id


class AlreadyWaitlistedError(DomainError):
    """Raised when a user is already queued for an event."""

    def __init__(self, user_id, event_id) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_WAITLISTED,
            message="You are already on the waiting list for this event",
        )
        self.user_id = user_id
        self.event_id = event_id


class WaitlistEntryNotFoundError(DomainError):
    """Raised when removing a user who is not queued."""

    def __init__(self, user_id, event_id) -> None:
        super().__init__(
            code=ErrorCode.WAITLIST_ENTRY_NOT_FOUND,
            message="You are not on the waiting list for this event",
        )
        self.user_id = user_id
        self.event_id = event_id


class CapacityInvariantViolation(DomainError):
    """Confirmed attendance would exceed the event maximum. Indicates a bug."""

    def __init__(self, event_id, confirmed: int, max_attendees: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_INVARIANT_VIOLATION,
            message=f"Confirmed attendees ({confirmed}) exceed capacity ({max_attendees})",
        )
        self.event_id = event_id


class DispatchFailure(DomainError):
    """A notification could not be delivered. Never rolls back state."""

    def __init__(self, user_id, kind: str, cause: Exception) -> None:
        super().__init__(
            code=ErrorCode.DISPATCH_FAILURE,
            message=f"Failed to dispatch {kind} notification",
        )
        self.user_id = user_id
        self.cause = cause


class PromotionError(DomainError):
    """A promotion batch failed and was rolled back."""

    def __init__(self, event_id) -> None:
        super().__init__(
            code=ErrorCode.PROMOTION_FAILED,
            message="Waiting list promotion failed",
        )
        self.event_id = event_id
