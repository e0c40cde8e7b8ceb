# clockwise/api/v1/endpoints/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.config import settings
from clockwise.core.exceptions import DataIntegrityError, to_http_exception
from clockwise.db import session
from clockwise.db.repositories import SqlDirectoryRepository, SqlTimesheetRepository, SqlUserSettingsRepository
from clockwise.schemas import timesheet as ts_schema
from clockwise.services import directory, reporting
from clockwise.services.date_ranges import PeriodType, Preset, preset_range

router = APIRouter()


def _period_bounds(period: PeriodType, preset: Optional[Preset], date_from: Optional[date],
                   date_to: Optional[date]):
    """Explicit dates win over a preset; with neither, the current month."""
    if date_from and date_to:
        if date_from > date_to:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must not be after date_to")
        return date_from, date_to
    bounds = preset_range(preset or Preset.THIS_MONTH)
    return bounds.start_date, bounds.end_date


@router.get("/entries", response_model=List[ts_schema.TimesheetEntry])
def list_entries(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    department_id: Optional[str] = None,
    user_id: Optional[str] = None,
    status_filter: Optional[str] = None,
    activity_type: Optional[str] = None,
    db: Session = Depends(session.get_db),
    viewer: security.CurrentUser = Depends(security.get_current_report_viewer)
):
    """ Raw entries behind the reports. "all" disables a filter. """
    members = directory.list_members(SqlDirectoryRepository(db), organization_id=viewer.organization_id)
    return SqlTimesheetRepository(db).fetch_entries(
        date_from=date_from,
        date_to=date_to,
        department_id=department_id,
        user_id=user_id,
        user_ids=[m.id for m in members],
        status=status_filter,
        activity_type=activity_type,
    )


@router.get("/member/{user_id}", response_model=reporting.MemberReport)
def read_member_report(
    user_id: str,
    period: PeriodType = PeriodType.MONTHLY,
    preset: Optional[Preset] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(session.get_db),
    viewer: security.CurrentUser = Depends(security.get_current_report_viewer)
):
    """ Hours, completion, activity mix and a per-period series for one member. """
    members = directory.list_members(SqlDirectoryRepository(db), organization_id=viewer.organization_id)
    if user_id not in {m.id for m in members}:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

    start, end = _period_bounds(period, preset, date_from, date_to)
    try:
        return reporting.build_member_report(
            SqlTimesheetRepository(db),
            SqlUserSettingsRepository(db),
            user_id=user_id,
            period=period,
            start=start,
            end=end,
            default_target_minutes=settings.DEFAULT_DAILY_TARGET_MINUTES,
        )
    except DataIntegrityError as exc:
        raise to_http_exception(exc)


@router.get("/department/{department_id}", response_model=reporting.DepartmentReport)
def read_department_report(
    department_id: str,
    period: PeriodType = PeriodType.MONTHLY,
    preset: Optional[Preset] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(session.get_db),
    viewer: security.CurrentUser = Depends(security.get_current_report_viewer)
):
    """ Same as the member report, summed over a department ("all" for the whole organization). """
    start, end = _period_bounds(period, preset, date_from, date_to)
    members = directory.list_members(
        SqlDirectoryRepository(db),
        organization_id=viewer.organization_id,
        department_id=None if department_id == "all" else department_id,
    )
    try:
        return reporting.build_department_report(
            SqlTimesheetRepository(db),
            SqlUserSettingsRepository(db),
            members,
            department_id=department_id,
            period=period,
            start=start,
            end=end,
            default_target_minutes=settings.DEFAULT_DAILY_TARGET_MINUTES,
        )
    except DataIntegrityError as exc:
        raise to_http_exception(exc)
