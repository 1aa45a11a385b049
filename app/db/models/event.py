from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func, Index
from sqlalchemy.dialects.postgresql import UUID
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base


class Event(Base):
    __tablename__ = "events"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    max_attendees = Column(Integer, nullable=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    creator = relationship("User")

    # Owned rows go away with the event
    rsvps = relationship("RSVP", back_populates="event", cascade="all, delete-orphan")
    waiting_list = relationship(
        "WaitingListEntry",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="WaitingListEntry.priority",
    )
    notifications = relationship("Notification", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_event_date', 'starts_at'),
        Index('idx_event_organizer', 'created_by'),
        Index('idx_event_created_at', 'created_at'),
    )
