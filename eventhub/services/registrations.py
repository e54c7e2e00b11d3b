import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from eventhub.core.exceptions import (
    AlreadyRegisteredError,
    CapacityExceededError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)
from eventhub.core.locks import event_lock
from eventhub.models.events import Event
from eventhub.models.registrations import Registration
from eventhub.models.users import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    name: str
    email: str
    phone: str


@contextmanager
def transaction(db: Session):
    """
    Run the block as one database transaction on ``db``.

    Whatever the session already has open (usually a read-only transaction
    autobegun by an earlier query) is committed first, so the block always
    starts a fresh BEGIN and everything inside it commits or rolls back
    together. Database errors come out as StoreUnavailableError.
    """
    if db.in_transaction():
        db.commit()
    try:
        with db.begin():
            yield db
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        logger.error("Transaction rolled back: %s", exc)
        raise StoreUnavailableError() from exc


def register(db: Session, *, user_id: int, event_id: int, contact: Contact) -> Registration:
    """
    Register a user for an event.

    The capacity check and the increment are a single conditional UPDATE,
    run together with the row insert in one transaction while holding the
    event's Redis lock. Either both land or neither does.
    """
    if not (contact.name.strip() and contact.email.strip() and contact.phone.strip()):
        raise InvalidInputError("All fields required")

    if db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")

    with event_lock(event_id):
        try:
            with transaction(db):
                registration = _register_in_transaction(db, user_id, event_id, contact)
        except IntegrityError as exc:
            # Unique (user_id, event_id) tripped; the increment was rolled back with it
            raise AlreadyRegisteredError() from exc

    db.refresh(registration)
    logger.info("User %s registered for event %s (registration %s)", user_id, event_id, registration.id)
    return registration


def _register_in_transaction(db: Session, user_id: int, event_id: int, contact: Contact) -> Registration:
    """Internal function to register within a transaction."""
    existing = db.scalar(
        select(Registration.id).where(
            Registration.user_id == user_id,
            Registration.event_id == event_id,
        )
    )
    if existing is not None:
        raise AlreadyRegisteredError()

    # Check capacity and increment registration_count atomically
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registration_count < Event.capacity)
        .values(registration_count=Event.registration_count + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:
        if db.get(Event, event_id) is None:
            raise NotFoundError("Event not found")
        raise CapacityExceededError()

    registration = Registration(
        user_id=user_id,
        event_id=event_id,
        name=contact.name.strip(),
        email=contact.email.strip(),
        phone=contact.phone.strip(),
    )
    db.add(registration)
    db.flush()  # gets registration.id, and surfaces the unique constraint here
    return registration


def unregister(db: Session, *, registration_id: int, requester_id: int) -> None:
    """Delete a registration owned by ``requester_id`` and give its slot back."""
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise NotFoundError("Registration not found")
    if registration.user_id != requester_id:
        raise ForbiddenError()

    event_id = registration.event_id
    with event_lock(event_id):
        with transaction(db):
            _unregister_in_transaction(db, registration_id, event_id)

    logger.info("User %s unregistered from event %s (registration %s)", requester_id, event_id, registration_id)


def _unregister_in_transaction(db: Session, registration_id: int, event_id: int) -> None:
    """Internal function to unregister within a transaction."""
    res = db.execute(
        delete(Registration)
        .where(Registration.id == registration_id)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        # Someone else removed it between our read and the delete
        raise NotFoundError("Registration not found")

    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(
            registration_count=case(
                (Event.registration_count > 0, Event.registration_count - 1),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )


def list_for_user(db: Session, user_id: int) -> list[Registration]:
    stmt = (
        select(Registration)
        .options(joinedload(Registration.event))
        .where(Registration.user_id == user_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def list_for_event(db: Session, *, event_id: int, requester_id: int) -> list[Registration]:
    """Registrations for an event, newest first. Only its organizer may list them."""
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    if event.organizer_id != requester_id:
        raise ForbiddenError()

    stmt = (
        select(Registration)
        .options(joinedload(Registration.user).load_only(User.id, User.name, User.email))
        .where(Registration.event_id == event_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def confirm_registration(db: Session, registration_id: int) -> None:
    if db.in_transaction():
        # Use existing transaction and commit it
        _confirm_registration_in_transaction(db, registration_id)
        db.commit()
    else:
        with db.begin():
            _confirm_registration_in_transaction(db, registration_id)


def _confirm_registration_in_transaction(db: Session, registration_id: int) -> None:
    """Internal function to confirm a registration within a transaction."""
    registration = db.get(Registration, registration_id)
    if not registration:
        # Unregistered before the confirmation went out
        return
    if registration.confirmed_at is None:
        registration.confirmed_at = datetime.now(timezone.utc)
