from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.config import Config
from app.core.security import require_admin
from app.database.db import get_db
from app.models.registrations import RegistrationStatus
from app.schemas.pagination import Pagination
from app.schemas.registrations import RegistrationOut, RegistrationPage, StatusUpdate
from app.services.errors import RegistrationError
from app.services.registrations import (
    delete_registration,
    export_registrations_csv,
    get_registration,
    list_registrations,
    set_status,
)

router = APIRouter(prefix="/registrations", tags=["registrations"], dependencies=[Depends(require_admin)])


def parse_status_param(status: Optional[str] = Query(default=None)) -> Optional[RegistrationStatus]:
    if status is None:
        return None
    try:
        return RegistrationStatus.parse(status)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=RegistrationPage)
def registrations_index(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=Config.PAGE_SIZE_DEFAULT, ge=1, le=Config.PAGE_SIZE_MAX),
    event_id: Optional[str] = None,
    status: Optional[RegistrationStatus] = Depends(parse_status_param),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    items, total = list_registrations(
        db, page=page, limit=limit, event_id=event_id, status=status, search=search
    )
    return {"registrations": items, "pagination": Pagination.build(page=page, limit=limit, total=total)}


@router.get("/export")
def registrations_export(event_id: Optional[str] = None, db: Session = Depends(get_db)):
    csv_text = export_registrations_csv(db, event_id=event_id)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=registrations.csv"},
    )


@router.get("/{registration_id}", response_model=RegistrationOut)
def registration_detail(registration_id: str, db: Session = Depends(get_db)):
    try:
        return get_registration(db, registration_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/{registration_id}/status", response_model=RegistrationOut)
def registration_status(registration_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    try:
        return set_status(db, registration_id, payload.status)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{registration_id}")
def registration_delete(registration_id: str, db: Session = Depends(get_db)):
    try:
        delete_registration(db, registration_id)
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"message": "Registration deleted"}
