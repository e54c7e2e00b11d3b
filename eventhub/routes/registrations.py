import logging

from fastapi import APIRouter, Depends, status
from kombu.exceptions import OperationalError
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from eventhub.core.security import get_current_user
from eventhub.database.db import get_db
from eventhub.models.users import User
from eventhub.schemas.registrations import (
    EventRegistrationOut,
    MessageOut,
    RegisterRequest,
    RegistrationOut,
)
from eventhub.services import registrations as registration_service
from eventhub.services.registrations import Contact
from eventhub.tasks import send_registration_confirmation_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post("", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def register_for_event(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    registration = registration_service.register(
        db,
        user_id=current_user.id,
        event_id=payload.event_id,
        contact=Contact(name=payload.name, email=payload.email, phone=payload.phone),
    )

    # The registration is committed; a confirmation that fails to enqueue must not undo it
    try:
        send_registration_confirmation_task.delay(registration.id)
    except (OperationalError, RedisError):
        logger.warning("Could not enqueue confirmation for registration %s", registration.id, exc_info=True)

    return registration


@router.get("", response_model=list[RegistrationOut])
def my_registrations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return registration_service.list_for_user(db, current_user.id)


@router.delete("/{registration_id}", response_model=MessageOut)
def unregister_from_event(
    registration_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    registration_service.unregister(db, registration_id=registration_id, requester_id=current_user.id)
    return {"message": "Successfully unregistered from event"}


@router.get("/event/{event_id}", response_model=list[EventRegistrationOut])
def event_registrations(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Registrations for one event; organizer only."""
    return registration_service.list_for_event(db, event_id=event_id, requester_id=current_user.id)
