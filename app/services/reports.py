from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.events import Event
from app.models.registrations import Registration, RegistrationStatus


def _status_counts(db: Session, *filters) -> dict[str, int]:
    rows = db.execute(
        select(Registration.status, func.count(Registration.id))
        .where(*filters)
        .group_by(Registration.status)
    ).all()
    counts = {status.value: 0 for status in RegistrationStatus}
    for status, count in rows:
        counts[status] = int(count)
    return counts


def get_event_stats(db: Session, event_id: str) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "current_registrations": event.current_registrations,
        "available": max(event.capacity - event.current_registrations, 0),
        "by_status": _status_counts(db, Registration.event_id == event_id),
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.capacity)))
    total_occupied = db.scalar(select(func.sum(Event.current_registrations)))
    total_registrations = db.scalar(select(func.count(Registration.id)))

    return {
        "total_capacity": int(total_capacity or 0),
        "total_occupied": int(total_occupied or 0),
        "total_registrations": int(total_registrations or 0),
        "by_status": _status_counts(db),
    }
