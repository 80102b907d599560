"""
Occupancy bookkeeping for events.

``Event.current_registrations`` is a maintained counter of the registrations
whose status holds a slot (PENDING, CONFIRMED). Every change to that
classification goes through ``take_slot``/``release_slot`` inside the same
transaction as the registration change. ``count_occupying`` derives the same
number from the ledger, and ``reconcile_event`` rewrites the counter from it.
"""
import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.events import Event
from app.models.registrations import OCCUPYING_STATUSES, Registration
from app.services.errors import EventNotFoundError, StoreUnavailableError
from app.services.locks import event_lock

logger = logging.getLogger(__name__)

_OCCUPYING_VALUES = sorted(s.value for s in OCCUPYING_STATUSES)


def take_slot(db: Session, event_id: str) -> bool:
    """Increment the counter only if the event is active and still has room."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.is_active.is_(True))
        .where(Event.current_registrations < Event.capacity)
        .values(current_registrations=Event.current_registrations + 1)
    )
    res = db.execute(stmt)
    return res.rowcount == 1  # type: ignore


def release_slot(db: Session, event_id: str) -> bool:
    """Decrement the counter, never below zero."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.current_registrations > 0)
        .values(current_registrations=Event.current_registrations - 1)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        logger.warning("Occupancy of event %s already at zero, not decremented", event_id)
        return False
    return True


def count_occupying(db: Session, event_id: str) -> int:
    count = db.scalar(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.status.in_(_OCCUPYING_VALUES),
        )
    )
    return int(count or 0)


def reconcile_event(db: Session, event_id: str) -> int:
    """
    Rewrite the event counter from the ledger and return the corrected value.

    The ledger wins even when it holds more occupying registrations than the
    event has seats: the counter then reads above capacity (and is only
    logged), so admission stays closed until enough seats are freed.
    """
    with event_lock(event_id):
        try:
            with transaction(db):
                corrected = _reconcile_in_transaction(db, event_id)
        except SQLAlchemyError as e:
            logger.exception("Store failure while reconciling event %s", event_id)
            raise StoreUnavailableError() from e
    return corrected


def _reconcile_in_transaction(db: Session, event_id: str) -> int:
    event = db.get(Event, event_id, populate_existing=True)
    if event is None:
        raise EventNotFoundError()

    derived = count_occupying(db, event_id)
    if derived != event.current_registrations:
        logger.warning(
            "Occupancy drift on event %s: counter=%s ledger=%s",
            event_id,
            event.current_registrations,
            derived,
        )
        db.execute(
            update(Event).where(Event.id == event_id).values(current_registrations=derived)
        )
    if derived > event.capacity:
        logger.warning("Event %s holds %s registrations for %s seats", event_id, derived, event.capacity)
    return derived


def reconcile_all(db: Session) -> dict[str, int]:
    event_ids = db.scalars(select(Event.id)).all()
    return {event_id: reconcile_event(db, event_id) for event_id in event_ids}
