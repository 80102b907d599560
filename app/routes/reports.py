from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.security import require_admin
from app.database.db import get_db
from app.schemas.reports import ReportOut
from app.services.reports import get_overall_report

router = APIRouter(prefix="/report", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("", response_model=ReportOut)
def overall_report(db: Session = Depends(get_db)):
    """Aggregate report across all events."""
    return get_overall_report(db)
