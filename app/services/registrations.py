import csv
import io
import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.database.db import transaction
from app.models.events import Event
from app.models.registrations import (
    Registration,
    RegistrationStatus,
    is_occupying,
)
from app.services.errors import (
    DuplicateRegistrationError,
    EventFullError,
    EventNotFoundError,
    RegistrationNotFoundError,
    StoreUnavailableError,
)
from app.services.locks import event_lock
from app.services.occupancy import release_slot, take_slot

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    "name",
    "phone",
    "organization",
    "dietary_restrictions",
    "accessibility_needs",
    "custom_data",
)

EXPORT_HEADERS = [
    "Name",
    "Email",
    "Phone",
    "Organization",
    "Dietary Restrictions",
    "Accessibility Needs",
    "Status",
    "Event",
    "Event Date",
    "Registered At",
]


def normalize_email(email: str) -> str:
    return email.strip().lower()


def admit(db: Session, *, event_id: str, email: str, details: dict) -> Registration:
    """
    Admit a new registration for an event.

    Checks, in order: the event exists and is active, the email holds no
    other non-cancelled registration for it, and a seat is left. The seat is
    taken with a conditional update and the registration inserted in the same
    transaction, all while holding the event lock. Any rejection or store
    failure leaves no trace.
    """
    email = normalize_email(email)
    with event_lock(event_id):
        try:
            with transaction(db):
                registration = _admit_in_transaction(db, event_id, email, details)
        except IntegrityError as e:
            logger.info("Duplicate registration for %s on event %s caught by index", email, event_id)
            raise DuplicateRegistrationError() from e
        except SQLAlchemyError as e:
            logger.exception("Store failure while admitting %s to event %s", email, event_id)
            raise StoreUnavailableError() from e

    logger.info("Admitted registration %s for event %s", registration.id, event_id)
    return registration


def _admit_in_transaction(db: Session, event_id: str, email: str, details: dict) -> Registration:
    event = db.get(Event, event_id, populate_existing=True)
    if event is None or not event.is_active:
        logger.info("Rejected %s: event %s not found or inactive", email, event_id)
        raise EventNotFoundError()

    if _live_registration_exists(db, event_id, email):
        logger.info("Rejected %s: already registered for event %s", email, event_id)
        raise DuplicateRegistrationError()

    if not take_slot(db, event_id):
        logger.info("Rejected %s: event %s is full", email, event_id)
        raise EventFullError()

    registration = Registration(
        event_id=event_id,
        email=email,
        status=RegistrationStatus.CONFIRMED.value,
        **{field: details.get(field) for field in DETAIL_FIELDS},
    )
    db.add(registration)
    db.flush()  # gets registration.id, trips the unique index
    return registration


def _live_registration_exists(
    db: Session, event_id: str, email: str, *, exclude_id: Optional[str] = None
) -> bool:
    stmt = select(Registration.id).where(
        Registration.event_id == event_id,
        Registration.email == email,
        Registration.status != RegistrationStatus.CANCELLED.value,
    )
    if exclude_id is not None:
        stmt = stmt.where(Registration.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def get_registration(db: Session, registration_id: str) -> Registration:
    registration = db.scalar(
        select(Registration)
        .options(selectinload(Registration.event))
        .where(Registration.id == registration_id)
    )
    if registration is None:
        raise RegistrationNotFoundError()
    return registration


def set_status(db: Session, registration_id: str, new_status: "str | RegistrationStatus") -> Registration:
    """
    Move a registration to ``new_status``.

    Any transition is allowed. Leaving PENDING/CONFIRMED gives the seat back;
    entering them takes a seat again and fails with ``EventFullError`` when
    none is left, or with ``EventNotFoundError`` when the event has been
    deactivated. Leaving CANCELLED re-runs the duplicate email check.
    """
    new_status = RegistrationStatus.parse(new_status)
    event_id = db.scalar(select(Registration.event_id).where(Registration.id == registration_id))
    if event_id is None:
        raise RegistrationNotFoundError()

    with event_lock(event_id):
        try:
            with transaction(db):
                old_status = _set_status_in_transaction(db, registration_id, new_status)
        except IntegrityError as e:
            raise DuplicateRegistrationError() from e
        except SQLAlchemyError as e:
            logger.exception("Store failure while updating registration %s", registration_id)
            raise StoreUnavailableError() from e

    logger.info("Registration %s: %s -> %s", registration_id, old_status.value, new_status.value)
    return get_registration(db, registration_id)


def _set_status_in_transaction(
    db: Session, registration_id: str, new_status: RegistrationStatus
) -> RegistrationStatus:
    registration = db.get(Registration, registration_id, populate_existing=True)
    if registration is None:
        raise RegistrationNotFoundError()

    old_status = RegistrationStatus.parse(registration.status)
    if old_status == new_status:
        return old_status

    if old_status == RegistrationStatus.CANCELLED and _live_registration_exists(
        db, registration.event_id, registration.email, exclude_id=registration.id
    ):
        raise DuplicateRegistrationError()

    was_occupying = is_occupying(old_status)
    now_occupying = is_occupying(new_status)
    if now_occupying and not was_occupying:
        event = db.get(Event, registration.event_id, populate_existing=True)
        if event is None or not event.is_active:
            raise EventNotFoundError()
        if not take_slot(db, registration.event_id):
            raise EventFullError()
    elif was_occupying and not now_occupying:
        release_slot(db, registration.event_id)

    registration.status = new_status.value
    db.flush()
    return old_status


def delete_registration(db: Session, registration_id: str) -> None:
    """Remove a registration, giving its seat back if it held one."""
    event_id = db.scalar(select(Registration.event_id).where(Registration.id == registration_id))
    if event_id is None:
        raise RegistrationNotFoundError()

    with event_lock(event_id):
        try:
            with transaction(db):
                _delete_in_transaction(db, registration_id)
        except SQLAlchemyError as e:
            logger.exception("Store failure while deleting registration %s", registration_id)
            raise StoreUnavailableError() from e

    logger.info("Deleted registration %s from event %s", registration_id, event_id)


def _delete_in_transaction(db: Session, registration_id: str) -> None:
    row = db.execute(
        select(Registration.event_id, Registration.status).where(Registration.id == registration_id)
    ).first()
    if row is None:
        raise RegistrationNotFoundError()

    res = db.execute(delete(Registration).where(Registration.id == registration_id))
    if res.rowcount != 1:  # type: ignore
        raise RegistrationNotFoundError()

    if is_occupying(row.status):
        release_slot(db, row.event_id)


def _filtered(stmt, *, event_id=None, status=None, search=None):
    if event_id:
        stmt = stmt.where(Registration.event_id == event_id)
    if status:
        stmt = stmt.where(Registration.status == RegistrationStatus.parse(status).value)
    if search:
        term = search.strip()
        stmt = stmt.where(
            or_(
                Registration.name.icontains(term, autoescape=True),
                Registration.email.icontains(term, autoescape=True),
            )
        )
    return stmt


def list_registrations(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    event_id: Optional[str] = None,
    status: "str | RegistrationStatus | None" = None,
    search: Optional[str] = None,
) -> tuple[list[Registration], int]:
    """Newest first. ``search`` matches name or email, case-insensitively."""
    filters = {"event_id": event_id, "status": status, "search": search}
    total = db.scalar(_filtered(select(func.count(Registration.id)), **filters))
    items = db.scalars(
        _filtered(select(Registration).options(selectinload(Registration.event)), **filters)
        .order_by(Registration.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(items), int(total or 0)


def export_registrations_csv(db: Session, *, event_id: Optional[str] = None) -> str:
    registrations = db.scalars(
        _filtered(select(Registration).options(selectinload(Registration.event)), event_id=event_id)
        .order_by(Registration.created_at.desc())
    ).all()

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for reg in registrations:
        writer.writerow([
            reg.name,
            reg.email,
            reg.phone,
            reg.organization or "",
            reg.dietary_restrictions or "",
            reg.accessibility_needs or "",
            reg.status,
            reg.event.title,
            reg.event.date.isoformat(),
            reg.created_at.date().isoformat(),
        ])
    return buffer.getvalue()
