# clockwise/api/v1/endpoints/approvals.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.exceptions import ClockWiseError, to_http_exception
from clockwise.db import session
from clockwise.db.repositories import SqlTimesheetRepository
from clockwise.schemas import timesheet as ts_schema
from clockwise.services import timesheets

router = APIRouter()


@router.get("", response_model=List[ts_schema.TimesheetEntry])
def list_pending(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status_filter: str = ts_schema.EntryStatus.SUBMITTED.value,
    db: Session = Depends(session.get_db),
    manager: security.CurrentUser = Depends(security.get_current_manager_user)
):
    """ Entries from the manager's department, submitted ones by default. """
    if not manager.department_id:
        return []
    return SqlTimesheetRepository(db).fetch_entries(
        date_from=date_from, date_to=date_to, department_id=manager.department_id, status=status_filter
    )


@router.post("/{entry_id}", response_model=ts_schema.TimesheetEntry)
def decide(
    entry_id: str,
    decision: ts_schema.ApprovalDecision,
    db: Session = Depends(session.get_db),
    manager: security.CurrentUser = Depends(security.get_current_manager_user)
):
    """ Approves or rejects one submitted entry. """
    try:
        return timesheets.decide_entry(db, manager, entry_id, decision)
    except ClockWiseError as exc:
        raise to_http_exception(exc)
