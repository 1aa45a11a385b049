from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum
from app.db.models.rsvp import RSVPStatusEnum


class AdmissionKind(str, Enum):
    confirmed = "confirmed"
    waitlisted = "waitlisted"
    updated = "updated"
    failed = "failed"


class UserCreate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None


class UserOut(BaseModel):
    id: UUID
    email: EmailStr
    full_name: Optional[str]

    class Config:
        from_attributes = True


class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    max_attendees: int = Field(..., gt=0, description="Maximum confirmed attendees")


class EventCreateRequest(EventCreate):
    created_by: UUID


class EventOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    location: Optional[str]
    starts_at: Optional[datetime]
    max_attendees: int
    created_by: UUID
    confirmed_count: int = 0
    available_spots: int = 0
    waiting_list_length: int = 0

    class Config:
        from_attributes = True


class RSVPCreate(BaseModel):
    user_id: UUID
    event_id: UUID
    status: RSVPStatusEnum = RSVPStatusEnum.attending
    guest_count: int = Field(1, ge=0, description="Informational only; does not consume capacity")


class RSVPOut(BaseModel):
    id: UUID
    user_id: UUID
    event_id: UUID
    status: RSVPStatusEnum
    guest_count: int

    class Config:
        from_attributes = True


class NotificationOut(BaseModel):
    id: UUID
    event_id: Optional[UUID]
    kind: str
    title: str
    message: Optional[str]
    is_read: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class WaitingListEntryOut(BaseModel):
    user_id: UUID
    event_id: UUID
    priority: int
    joined_at: Optional[datetime]
    notified: bool

    class Config:
        from_attributes = True


class WaitingListPosition(BaseModel):
    """Queue position; -1 means the user is not on the waiting list."""
    user_id: UUID
    event_id: UUID
    position: int


class AdmissionOut(BaseModel):
    result: AdmissionKind
    message: str
    rsvp: Optional[RSVPOut] = None
    waiting_list_entry: Optional[WaitingListEntryOut] = None


class PromotionOut(BaseModel):
    event_id: UUID
    promoted: List[RSVPOut]
