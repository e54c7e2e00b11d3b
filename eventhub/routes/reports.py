from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventhub.core.security import get_current_user
from eventhub.database.db import get_db
from eventhub.models.users import User
from eventhub.schemas.reports import OrganizerReportOut
from eventhub.services.reports import get_organizer_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/me", response_model=OrganizerReportOut)
def organizer_report(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Aggregate report across the caller's events."""
    return get_organizer_report(db, current_user.id)
