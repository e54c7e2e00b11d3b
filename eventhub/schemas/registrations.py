from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from eventhub.schemas.events import EventSummaryOut
from eventhub.schemas.users import UserPublic


class RegisterRequest(BaseModel):
    event_id: int = Field(ge=1, alias="eventId")
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=32)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    name: str
    email: str
    phone: str
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    event: EventSummaryOut

    class Config:
        from_attributes = True


class EventRegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    name: str
    email: str
    phone: str
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    user: UserPublic

    class Config:
        from_attributes = True


class MessageOut(BaseModel):
    message: str
