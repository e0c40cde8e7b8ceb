# clockwise/services/timesheets.py
# Entry lifecycle: draft -> submitted -> approved | rejected, rejected entries may be edited and resubmitted.
import logging
from typing import Optional

from sqlalchemy.orm import Session

from clockwise.core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError
from clockwise.core.security import CurrentUser
from clockwise.db import models
from clockwise.schemas.timesheet import ApprovalDecision, EntryStatus, TimesheetEntryCreate
from clockwise.services.time_utils import calculate_duration_minutes

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (EntryStatus.DRAFT.value, EntryStatus.REJECTED.value)


def _get_entry(db: Session, entry_id: str) -> models.TimesheetEntry:
    entry = db.query(models.TimesheetEntry).filter(models.TimesheetEntry.id == entry_id).first()
    if not entry:
        raise NotFoundError("Timesheet entry not found")
    return entry


def _get_own_entry(db: Session, user: CurrentUser, entry_id: str) -> models.TimesheetEntry:
    entry = _get_entry(db, entry_id)
    if entry.user_id != user.id:
        # Same answer as a missing entry, other people's entries are not disclosed.
        raise NotFoundError("Timesheet entry not found")
    return entry


def create_entry(db: Session, user: CurrentUser, data: TimesheetEntryCreate, submit: bool = False,
                 department_id: Optional[str] = None) -> models.TimesheetEntry:
    entry = models.TimesheetEntry(
        user_id=user.id,
        department_id=department_id or user.department_id,
        entry_date=data.entry_day,
        start_time=data.start_time,
        end_time=data.end_time,
        duration_minutes=calculate_duration_minutes(data.start_time, data.end_time),
        activity_type=data.activity_type.value,
        activity_subtype=data.activity_subtype,
        notes=data.notes,
        status=EntryStatus.SUBMITTED.value if submit else EntryStatus.DRAFT.value,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def update_entry(db: Session, user: CurrentUser, entry_id: str, data: TimesheetEntryCreate) -> models.TimesheetEntry:
    entry = _get_own_entry(db, user, entry_id)
    if entry.status not in EDITABLE_STATUSES:
        raise InvalidTransitionError(f"Cannot edit an entry that is {entry.status}")
    entry.entry_date = data.entry_day
    entry.start_time = data.start_time
    entry.end_time = data.end_time
    entry.duration_minutes = calculate_duration_minutes(data.start_time, data.end_time)
    entry.activity_type = data.activity_type.value
    entry.activity_subtype = data.activity_subtype
    entry.notes = data.notes
    db.commit()
    db.refresh(entry)
    return entry


def delete_entry(db: Session, user: CurrentUser, entry_id: str) -> None:
    entry = _get_own_entry(db, user, entry_id)
    if entry.status != EntryStatus.DRAFT.value:
        raise InvalidTransitionError("Only draft entries can be deleted")
    db.delete(entry)
    db.commit()


def submit_entry(db: Session, user: CurrentUser, entry_id: str) -> models.TimesheetEntry:
    entry = _get_own_entry(db, user, entry_id)
    if entry.status not in EDITABLE_STATUSES:
        raise InvalidTransitionError(f"Cannot submit an entry that is {entry.status}")
    entry.status = EntryStatus.SUBMITTED.value
    entry.approver_id = None
    entry.approver_notes = None
    db.commit()
    db.refresh(entry)
    return entry


def decide_entry(db: Session, approver: CurrentUser, entry_id: str,
                 decision: ApprovalDecision) -> models.TimesheetEntry:
    entry = _get_entry(db, entry_id)
    if not approver.department_id or entry.department_id != approver.department_id:
        raise AuthorizationError("You can only review entries from your own department")
    if entry.status != EntryStatus.SUBMITTED.value:
        raise InvalidTransitionError(f"Only submitted entries can be reviewed, this one is {entry.status}")
    entry.status = EntryStatus.APPROVED.value if decision.approve else EntryStatus.REJECTED.value
    entry.approver_id = approver.id
    entry.approver_notes = decision.approver_notes
    db.commit()
    db.refresh(entry)
    logger.info("Entry %s %s by %s", entry.id, entry.status, approver.id)
    return entry
