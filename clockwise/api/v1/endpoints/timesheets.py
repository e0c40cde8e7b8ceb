# clockwise/api/v1/endpoints/timesheets.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.exceptions import ClockWiseError, to_http_exception
from clockwise.db import session
from clockwise.db.repositories import SqlTimesheetRepository
from clockwise.schemas import timesheet as ts_schema
from clockwise.services import csv_import, timesheets
from clockwise.services.auth_provider import AuthProviderClient, get_auth_provider
from clockwise.services.roles import Role

router = APIRouter()


class CsvImport(BaseModel):
    content: str


@router.get("", response_model=List[ts_schema.TimesheetEntry])
def list_my_entries(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status_filter: Optional[str] = None,
    activity_type: Optional[str] = None,
    db: Session = Depends(session.get_db),
    member: security.CurrentUser = Depends(security.get_current_member_user)
):
    """ The caller's own entries, newest first. """
    return SqlTimesheetRepository(db).fetch_entries(
        date_from=date_from, date_to=date_to, user_id=member.id, status=status_filter, activity_type=activity_type
    )


@router.post("", response_model=ts_schema.TimesheetEntry, status_code=status.HTTP_201_CREATED)
def create_entry(
    entry_in: ts_schema.TimesheetEntryCreateRequest,
    db: Session = Depends(session.get_db),
    member: security.CurrentUser = Depends(security.get_current_member_user)
):
    return timesheets.create_entry(db, member, entry_in, submit=entry_in.submit)


@router.put("/{entry_id}", response_model=ts_schema.TimesheetEntry)
def update_entry(
    entry_id: str,
    entry_in: ts_schema.TimesheetEntryCreate,
    db: Session = Depends(session.get_db),
    member: security.CurrentUser = Depends(security.get_current_member_user)
):
    """ Edits a draft or rejected entry. """
    try:
        return timesheets.update_entry(db, member, entry_id, entry_in)
    except ClockWiseError as exc:
        raise to_http_exception(exc)


@router.post("/{entry_id}/submit", response_model=ts_schema.TimesheetEntry)
def submit_entry(
    entry_id: str,
    db: Session = Depends(session.get_db),
    member: security.CurrentUser = Depends(security.get_current_member_user)
):
    try:
        return timesheets.submit_entry(db, member, entry_id)
    except ClockWiseError as exc:
        raise to_http_exception(exc)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: str,
    db: Session = Depends(session.get_db),
    member: security.CurrentUser = Depends(security.get_current_member_user)
):
    try:
        timesheets.delete_entry(db, member, entry_id)
    except ClockWiseError as exc:
        raise to_http_exception(exc)
    return


@router.get("/import/template", response_class=PlainTextResponse)
def import_template():
    return PlainTextResponse(csv_import.csv_template(), media_type="text/csv")


@router.post("/import", response_model=ts_schema.ImportResult)
async def import_entries(
    payload: CsvImport,
    db: Session = Depends(session.get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """
    Bulk upload from CSV. Admins may import for anyone in their organization,
    members only for themselves. Valid rows are inserted as drafts.
    """
    if current_user.role not in (Role.ORG_ADMIN, Role.MEMBER):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions for this resource")

    rows = csv_import.parse_csv(payload.content)
    if not rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The CSV file has no data rows")

    users_by_email, departments_by_code = await csv_import.lookup_maps(db, provider, current_user.organization_id)
    if current_user.role == Role.MEMBER:
        users_by_email = {email: uid for email, uid in users_by_email.items() if uid == current_user.id}

    valid, invalid = [], []
    for number, row in enumerate(rows, start=1):
        values, errors = csv_import.validate_csv_row(row, users_by_email, departments_by_code)
        if errors:
            invalid.append(ts_schema.ImportFailure(row=number, errors=errors))
        else:
            valid.append(values)

    success, failed, batch_errors = csv_import.bulk_insert(db, valid)
    return ts_schema.ImportResult(
        success=success, failed=failed + len(invalid), invalid_rows=invalid, batch_errors=batch_errors
    )
