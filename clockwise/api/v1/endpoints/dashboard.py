# clockwise/api/v1/endpoints/dashboard.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.config import settings
from clockwise.core.exceptions import DataIntegrityError, to_http_exception
from clockwise.db import session
from clockwise.db.repositories import SqlDirectoryRepository, SqlTimesheetRepository, SqlUserSettingsRepository
from clockwise.services import directory, reporting
from clockwise.services.date_ranges import RangeKey, date_range

router = APIRouter()


class CompletionCard(BaseModel):
    range: RangeKey
    date_from: date
    date_to: date
    daily_target_minutes: int
    completion: reporting.CompletionMetrics
    summary: reporting.SummaryStats


class TeamMemberSummary(BaseModel):
    user_id: str
    name: str
    department_name: str
    completion: reporting.CompletionMetrics


class TeamReport(BaseModel):
    date_from: date
    date_to: date
    members: List[TeamMemberSummary]


def _resolve_range(range_key: RangeKey, date_from: Optional[date], date_to: Optional[date]):
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must not be after date_to")
    return date_range(range_key, custom_from=date_from, custom_to=date_to)


# --- API Endpoints ---

@router.get("/me", response_model=CompletionCard)
def read_dashboard_me(
    range_key: RangeKey = RangeKey.WEEK,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """ Completion card for the currently logged-in user over today/week/month or a custom range. """
    bounds = _resolve_range(range_key, date_from, date_to)
    entries = SqlTimesheetRepository(db).fetch_entries(
        date_from=bounds.start_date, date_to=bounds.end_date, user_id=current_user.id
    )
    target = reporting.effective_daily_target(
        SqlUserSettingsRepository(db).get(current_user.id), settings.DEFAULT_DAILY_TARGET_MINUTES
    )
    try:
        return CompletionCard(
            range=range_key,
            date_from=bounds.start_date,
            date_to=bounds.end_date,
            daily_target_minutes=target,
            completion=reporting.completion_metrics(entries, target, bounds.start_date, bounds.end_date),
            summary=reporting.summary_stats(entries),
        )
    except DataIntegrityError as exc:
        raise to_http_exception(exc)


@router.get("/team", response_model=TeamReport)
def read_dashboard_team(
    range_key: RangeKey = RangeKey.WEEK,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(session.get_db),
    manager: security.CurrentUser = Depends(security.get_current_manager_user)
):
    """ Completion per member of the manager's department. """
    bounds = _resolve_range(range_key, date_from, date_to)
    if not manager.department_id:
        return TeamReport(date_from=bounds.start_date, date_to=bounds.end_date, members=[])

    members = directory.list_members(
        SqlDirectoryRepository(db), organization_id=manager.organization_id, department_id=manager.department_id
    )
    member_ids = [m.id for m in members]
    entries = SqlTimesheetRepository(db).fetch_entries(
        date_from=bounds.start_date, date_to=bounds.end_date, user_ids=member_ids
    )
    targets = SqlUserSettingsRepository(db).get_many(member_ids)

    summaries = []
    try:
        for member in members:
            own = [e for e in entries if e.user_id == member.id]
            target = reporting.effective_daily_target(targets.get(member.id), settings.DEFAULT_DAILY_TARGET_MINUTES)
            summaries.append(TeamMemberSummary(
                user_id=member.id,
                name=member.full_name,
                department_name=member.department_name,
                completion=reporting.completion_metrics(own, target, bounds.start_date, bounds.end_date),
            ))
    except DataIntegrityError as exc:
        raise to_http_exception(exc)
    return TeamReport(date_from=bounds.start_date, date_to=bounds.end_date, members=summaries)
