from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base


class WaitingListEntry(Base):
    """
    A user's place in an event's waiting list.

    `priority` is the queue position: within one event the values are exactly
    1..N, lower is earlier. Entries are reindexed on removal, never sorted by
    `joined_at`.
    """
    __tablename__ = "waiting_list_entries"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    priority = Column(Integer, nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    notified = Column(Boolean, default=False, nullable=False)

    user = relationship("User")
    event = relationship("Event", back_populates="waiting_list")

    __table_args__ = (
        UniqueConstraint('user_id', 'event_id', name='uq_waitlist_user_event'),
        UniqueConstraint('event_id', 'priority', name='uq_waitlist_event_priority'),
        CheckConstraint('priority <> 0', name='ck_waitlist_priority_nonzero'),
        Index('idx_waitlist_event_priority', 'event_id', 'priority'),
    )

    def __repr__(self) -> str:
        return f"<WaitingListEntry user={self.user_id} event={self.event_id} priority={self.priority}>"
