import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from eventhub.models.events import EventCategory, EventStatus


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: EventCategory
    date: dt.date
    time: str = Field(min_length=1, max_length=32)
    location: str = Field(min_length=1, max_length=255)
    capacity: int = Field(ge=1)
    image: Optional[str] = Field(default=None, max_length=500)
    status: EventStatus = EventStatus.PUBLISHED


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[EventCategory] = None
    date: Optional[dt.date] = None
    time: Optional[str] = Field(default=None, min_length=1, max_length=32)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = Field(default=None, min_length=1, max_length=500)
    status: Optional[EventStatus] = None


class OrganizerOut(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class EventSummaryOut(BaseModel):
    id: int
    title: str
    category: str
    date: dt.date
    time: str
    location: str
    image: str
    status: str

    class Config:
        from_attributes = True


class EventOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    date: dt.date
    time: str
    location: str
    image: str
    capacity: int
    registration_count: int
    status: str
    organizer_id: int
    organizer: OrganizerOut
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: int
    capacity: int
    registration_count: int
    spots_left: int
    confirmed_count: int
