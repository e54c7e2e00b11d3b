from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.core.security import get_current_user
from eventhub.database.db import get_db
from eventhub.models.users import User
from eventhub.schemas.events import EventCreate, EventOut, EventStatsOut, EventUpdate
from eventhub.schemas.registrations import MessageOut
from eventhub.services import events as event_service

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def list_events(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return event_service.list_events(db, category=category, search=search)


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return event_service.create_event(db, organizer_id=current_user.id, payload=payload)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return event_service.update_event(db, event_id=event_id, requester_id=current_user.id, payload=payload)


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event_service.delete_event(db, event_id=event_id, requester_id=current_user.id)
    return {"message": "Event deleted successfully"}


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event_stats(db, event_id)
