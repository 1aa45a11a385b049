from sqlalchemy import Column, Integer, DateTime, ForeignKey, func, Enum, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base
import enum

class RSVPStatusEnum(str, enum.Enum):
    attending = "attending"
    maybe = "maybe"
    not_attending = "not_attending"

class RSVP(Base):
    """Attendance record. Only `attending` rows consume capacity."""
    __tablename__ = "rsvps"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(RSVPStatusEnum), default=RSVPStatusEnum.attending, nullable=False)
    guest_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    event = relationship("Event", back_populates="rsvps")
    
    # One record per (user, event); repeat RSVPs update it
    __table_args__ = (
        UniqueConstraint('user_id', 'event_id', name='uq_user_event_rsvp'),
        Index('idx_rsvp_user', 'user_id'),
        Index('idx_rsvp_event_status', 'event_id', 'status'),
    )
