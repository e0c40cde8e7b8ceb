# clockwise/services/csv_import.py
# Bulk upload of timesheet rows from CSV.
import csv
import io
import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clockwise.core.exceptions import AuthProviderError
from clockwise.db import models
from clockwise.schemas.timesheet import validate_timesheet_entry
from clockwise.services.time_utils import calculate_duration_minutes

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("faculty_email", "entry_date", "start_time", "end_time", "activity_type", "department_code")
BATCH_SIZE = 100


def _normalise_header(header: str) -> str:
    return "_".join(header.strip().lower().split())


def parse_csv(text: str) -> List[Dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames:
        reader.fieldnames = [_normalise_header(h) for h in reader.fieldnames]
    rows = []
    for row in reader:
        values = {k: (v or "").strip() for k, v in row.items() if k}
        if any(values.values()):
            rows.append(values)
    return rows


def validate_csv_row(row: Mapping[str, str], users_by_email: Mapping[str, str],
                     departments_by_code: Mapping[str, str]) -> Tuple[Optional[dict], List[str]]:
    """Returns (insertable values, []) for a good row and (None, errors) otherwise."""
    errors = [f"Missing {column}" for column in REQUIRED_COLUMNS if not row.get(column)]
    if errors:
        return None, errors

    user_id = users_by_email.get(row["faculty_email"].strip().lower())
    if not user_id:
        errors.append(f"User not found: {row['faculty_email']}")
    department_id = departments_by_code.get(row["department_code"].strip().upper())
    if not department_id:
        errors.append(f"Department not found: {row['department_code']}")

    candidate = {
        "entry_date": row["entry_date"],
        "start_time": row["start_time"],
        "end_time": row["end_time"],
        "activity_type": row["activity_type"].strip().lower(),
        "activity_subtype": row.get("activity_subtype") or None,
        "notes": row.get("notes") or None,
    }
    for field, message in validate_timesheet_entry(candidate).items():
        errors.append(f"{field}: {message} ({row.get(field, '')})")
    if errors:
        return None, errors

    candidate.update({
        "entry_date": date.fromisoformat(candidate["entry_date"]),
        "user_id": user_id,
        "department_id": department_id,
        "duration_minutes": calculate_duration_minutes(candidate["start_time"], candidate["end_time"]),
        "status": "draft",
    })
    return candidate, []


async def lookup_maps(db: Session, provider, organization_id: Optional[str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    email -> user id for the organization's users (emails live with the auth
    provider), department code -> id. A failing user fetch leaves the email map empty.
    """
    role_query = db.query(models.UserRole.user_id)
    dept_query = db.query(models.Department)
    if organization_id:
        role_query = role_query.filter(models.UserRole.organization_id == organization_id)
        dept_query = dept_query.filter(models.Department.organization_id == organization_id)
    org_user_ids = {user_id for (user_id,) in role_query.all()}

    emails: Dict[str, str] = {}
    try:
        auth_users = await provider.list_users()
    except AuthProviderError:
        logger.exception("Error fetching auth users for import")
        auth_users = []
    for user in auth_users:
        if user.get("email") and user.get("id") in org_user_ids:
            emails[user["email"].lower()] = user["id"]

    departments = {dept.code.upper(): dept.id for dept in dept_query.all()}
    return emails, departments


def bulk_insert(db: Session, rows: List[dict], batch_size: int = BATCH_SIZE) -> Tuple[int, int, List[dict]]:
    """Inserts in batches. A failing batch is rolled back and counted, the rest still go in."""
    success, failed, errors = 0, 0, []
    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        try:
            db.add_all([models.TimesheetEntry(**values) for values in batch])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            failed += len(batch)
            errors.append({"batch": start // batch_size + 1, "error": str(exc.__cause__ or exc)})
            logger.error("Import batch %d failed: %s", start // batch_size + 1, exc)
        else:
            success += len(batch)
    return success, failed, errors


def csv_template() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["faculty_email", "entry_date", "start_time", "end_time", "activity_type",
                     "activity_subtype", "notes", "department_code"])
    writer.writerow(["faculty@university.edu", "2025-01-15", "09:00", "11:00", "class",
                     "CS101 - Introduction", "Lecture on Python basics", "CS"])
    return buffer.getvalue()
