import logging
import re
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.events import Event
from app.services.errors import (
    CapacityBelowOccupancyError,
    EventNotFoundError,
    StoreUnavailableError,
)
from app.services.locks import event_lock

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "title",
    "description",
    "short_description",
    "date",
    "time",
    "location",
    "category",
    "price",
    "tags",
    "is_featured",
    "is_active",
)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return slug or "event"


def unique_slug(db: Session, title: str, *, exclude_id: Optional[str] = None) -> str:
    base = slugify(title)
    slug, counter = base, 1
    while True:
        stmt = select(Event.id).where(Event.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Event.id != exclude_id)
        if db.scalar(stmt) is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1


def create_event(db: Session, data: dict) -> Event:
    event = Event(
        slug=unique_slug(db, data["title"]),
        current_registrations=0,
        capacity=data["capacity"],
        **{field: data[field] for field in _EDITABLE_FIELDS if field in data},
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event %s (%s) with capacity %s", event.id, event.slug, event.capacity)
    return event


def list_events(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    active: Optional[bool] = True,
    category: Optional[str] = None,
    featured: Optional[bool] = None,
) -> tuple[list[Event], int]:
    """Featured events first, then by date. ``active=None`` lists every event."""
    filters = []
    if active is not None:
        filters.append(Event.is_active.is_(active))
    if category:
        filters.append(Event.category == category)
    if featured is not None:
        filters.append(Event.is_featured.is_(featured))

    total = db.scalar(select(func.count(Event.id)).where(*filters))
    events = db.scalars(
        select(Event)
        .where(*filters)
        .order_by(Event.is_featured.desc(), Event.date.asc(), Event.time.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(events), int(total or 0)


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError()
    return event


def get_event_by_slug(db: Session, slug: str) -> Event:
    event = db.scalar(select(Event).where(Event.slug == slug))
    if event is None or not event.is_active:
        raise EventNotFoundError()
    return event


def update_event(db: Session, event_id: str, data: dict) -> Event:
    """
    Partial update. A capacity change is written with a conditional update so
    it can never drop below the seats already taken.
    """
    with event_lock(event_id):
        try:
            with transaction(db):
                _update_in_transaction(db, event_id, data)
        except SQLAlchemyError as e:
            logger.exception("Store failure while updating event %s", event_id)
            raise StoreUnavailableError() from e
    event = get_event(db, event_id)
    db.refresh(event)
    return event


def _update_in_transaction(db: Session, event_id: str, data: dict) -> None:
    event = db.get(Event, event_id, populate_existing=True)
    if event is None:
        raise EventNotFoundError()

    if data.get("capacity") is not None and data["capacity"] != event.capacity:
        res = db.execute(
            update(Event)
            .where(Event.id == event_id)
            .where(Event.current_registrations <= data["capacity"])
            .values(capacity=data["capacity"])
        )
        if res.rowcount != 1:  # type: ignore
            raise CapacityBelowOccupancyError()

    for field in _EDITABLE_FIELDS:
        if data.get(field) is not None:
            setattr(event, field, data[field])
    if data.get("title"):
        event.slug = unique_slug(db, data["title"], exclude_id=event_id)
    db.flush()


def delete_event(db: Session, event_id: str) -> None:
    with event_lock(event_id):
        try:
            with transaction(db):
                event = db.get(Event, event_id)
                if event is None:
                    raise EventNotFoundError()
                db.delete(event)
        except SQLAlchemyError as e:
            logger.exception("Store failure while deleting event %s", event_id)
            raise StoreUnavailableError() from e
    logger.info("Deleted event %s and its registrations", event_id)
