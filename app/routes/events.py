from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.config import Config
from app.core.security import is_admin, require_admin
from app.database.db import get_db
from app.schemas.events import EventCreate, EventOut, EventPage, EventStatsOut, EventUpdate, OccupancyOut
from app.schemas.pagination import Pagination
from app.schemas.registrations import RegistrationCreate, RegistrationOut, RegistrationPage
from app.services import events as event_service
from app.services.errors import RegistrationError
from app.services.occupancy import reconcile_event
from app.services.registrations import admit, get_registration, list_registrations
from app.services.reports import get_event_stats

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=EventPage)
def events_index(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=Config.PAGE_SIZE_DEFAULT, ge=1, le=Config.PAGE_SIZE_MAX),
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    active: Optional[bool] = Query(default=True),
    include_all: bool = Query(default=False, alias="all"),
    admin: bool = Depends(is_admin),
    db: Session = Depends(get_db),
):
    # anonymous callers only ever see active events
    if not admin:
        active = True
    elif include_all:
        active = None
    events, total = event_service.list_events(
        db, page=page, limit=limit, active=active, category=category, featured=featured
    )
    return {"events": events, "pagination": Pagination.build(page=page, limit=limit, total=total)}


@router.post("", response_model=EventOut, status_code=201, dependencies=[Depends(require_admin)])
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    return event_service.create_event(db, payload.model_dump())


@router.get("/{slug}", response_model=EventOut)
def event_by_slug(slug: str, db: Session = Depends(get_db)):
    try:
        return event_service.get_event_by_slug(db, slug)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/{event_id}", response_model=EventOut, dependencies=[Depends(require_admin)])
def update_event(event_id: str, payload: EventUpdate, db: Session = Depends(get_db)):
    try:
        return event_service.update_event(db, event_id, payload.model_dump(exclude_unset=True))
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{event_id}", dependencies=[Depends(require_admin)])
def delete_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event_service.delete_event(db, event_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"message": "Event deleted"}


@router.post("/{event_id}/registrations", response_model=RegistrationOut, status_code=201)
def register(event_id: str, payload: RegistrationCreate, db: Session = Depends(get_db)):
    details = payload.model_dump(exclude={"email"})
    try:
        registration = admit(db, event_id=event_id, email=payload.email, details=details)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return get_registration(db, registration.id)


@router.get(
    "/{event_id}/registrations",
    response_model=RegistrationPage,
    dependencies=[Depends(require_admin)],
)
def event_registrations(
    event_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=Config.PAGE_SIZE_DEFAULT, ge=1, le=Config.PAGE_SIZE_MAX),
    db: Session = Depends(get_db),
):
    try:
        event_service.get_event(db, event_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    items, total = list_registrations(db, page=page, limit=limit, event_id=event_id)
    return {"registrations": items, "pagination": Pagination.build(page=page, limit=limit, total=total)}


@router.get("/{event_id}/stats", response_model=EventStatsOut, dependencies=[Depends(require_admin)])
def event_stats(event_id: str, db: Session = Depends(get_db)):
    stats = get_event_stats(db, event_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Event not found")
    return stats


@router.post(
    "/{event_id}/occupancy/reconcile",
    response_model=OccupancyOut,
    dependencies=[Depends(require_admin)],
)
def reconcile_occupancy(event_id: str, db: Session = Depends(get_db)):
    try:
        corrected = reconcile_event(db, event_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"event_id": event_id, "current_registrations": corrected}
