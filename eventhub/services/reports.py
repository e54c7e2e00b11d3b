from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventhub.models.events import Event
from eventhub.models.registrations import Registration


def get_organizer_report(db: Session, organizer_id: int) -> dict:
    """Return aggregated totals across the events one organizer runs."""
    total_events, total_capacity, total_registered = db.execute(
        select(
            func.count(Event.id),
            func.sum(Event.capacity),
            func.sum(Event.registration_count),
        ).where(Event.organizer_id == organizer_id)
    ).one()

    total_confirmed = db.scalar(
        select(func.count(Registration.id))
        .join(Event, Registration.event_id == Event.id)
        .where(
            Event.organizer_id == organizer_id,
            Registration.confirmed_at.is_not(None),
        )
    )

    return {
        "total_events": int(total_events or 0),
        "total_capacity": int(total_capacity or 0),
        "total_registered": int(total_registered or 0),
        "total_confirmed": int(total_confirmed or 0),
    }
