import logging
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, joinedload

from eventhub.core.config import DEFAULT_EVENT_IMAGE
from eventhub.core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from eventhub.core.locks import event_lock
from eventhub.models.events import Event, EventStatus
from eventhub.models.registrations import Registration
from eventhub.schemas.events import EventCreate, EventUpdate
from eventhub.services.registrations import transaction

logger = logging.getLogger(__name__)


def create_event(db: Session, *, organizer_id: int, payload: EventCreate) -> Event:
    event = Event(
        title=payload.title,
        description=payload.description,
        category=payload.category.value,
        date=payload.date,
        time=payload.time,
        location=payload.location,
        image=payload.image or DEFAULT_EVENT_IMAGE,
        capacity=payload.capacity,
        registration_count=0,
        status=(payload.status or EventStatus.PUBLISHED).value,
        organizer_id=organizer_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created by user %s", event.id, organizer_id)
    return event


def list_events(db: Session, *, category: Optional[str] = None, search: Optional[str] = None) -> list[Event]:
    """Events newest first, optionally filtered by category and a title/description search."""
    stmt = select(Event).options(joinedload(Event.organizer))
    if category and category != "all":
        stmt = stmt.where(Event.category == category)
    if search:
        needle = search.lower()
        stmt = stmt.where(
            or_(
                func.lower(Event.title).contains(needle, autoescape=True),
                func.lower(Event.description).contains(needle, autoescape=True),
            )
        )
    stmt = stmt.order_by(Event.created_at.desc(), Event.id.desc())
    return list(db.scalars(stmt))


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def _get_owned_event(db: Session, event_id: int, requester_id: int) -> Event:
    event = get_event(db, event_id)
    if event.organizer_id != requester_id:
        raise ForbiddenError("Not authorized to modify this event")
    return event


def update_event(db: Session, *, event_id: int, requester_id: int, payload: EventUpdate) -> Event:
    """
    Apply the fields present in ``payload`` to an event owned by ``requester_id``.

    The write is one UPDATE statement. When capacity changes it only
    matches while registration_count still fits under the new capacity,
    so a concurrent registration can never be squeezed out.
    """
    _get_owned_event(db, event_id, requester_id)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key in ("category", "status"):
        if key in changes:
            changes[key] = changes[key].value
    if not changes:
        return get_event(db, event_id)

    stmt = update(Event).where(Event.id == event_id)
    new_capacity = changes.get("capacity")
    if new_capacity is not None:
        stmt = stmt.where(Event.registration_count <= new_capacity)
    stmt = stmt.values(**changes).execution_options(synchronize_session=False)

    with event_lock(event_id):
        with transaction(db):
            res = db.execute(stmt)
            if res.rowcount != 1:
                if db.get(Event, event_id) is None:
                    raise NotFoundError("Event not found")
                raise InvalidInputError("Capacity cannot be lower than the number of registrations")

    logger.info("Event %s updated by user %s: %s", event_id, requester_id, sorted(changes))
    return get_event(db, event_id)


def delete_event(db: Session, *, event_id: int, requester_id: int) -> None:
    """Delete an event together with all of its registrations."""
    _get_owned_event(db, event_id, requester_id)

    with event_lock(event_id):
        with transaction(db):
            event = db.get(Event, event_id)
            if event is None:
                raise NotFoundError("Event not found")
            db.delete(event)

    logger.info("Event %s deleted by user %s", event_id, requester_id)


def get_event_stats(db: Session, event_id: int) -> dict:
    event = get_event(db, event_id)

    confirmed_count = db.scalar(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.confirmed_at.is_not(None),
        )
    )

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "registration_count": event.registration_count,
        "spots_left": max(event.capacity - event.registration_count, 0),
        "confirmed_count": int(confirmed_count or 0),
    }
