# clockwise/schemas/timesheet.py
import re
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from clockwise.services.time_utils import is_valid_iso_date, to_minutes

TIME_RE = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")


class ActivityType(str, Enum):
    CLASS = "class"
    QUIZ = "quiz"
    INVIGILATION = "invigilation"
    ADMIN = "admin"
    OTHER = "other"


class EntryStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


def _optional_text(value: Optional[str], limit: int, label: str) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > limit:
        raise PydanticCustomError(
            "too_long", "{label} must be less than {limit} characters", {"label": label, "limit": limit}
        )
    return value or None


class TimesheetEntryCreate(BaseModel):
    entry_date: str
    start_time: str
    end_time: str
    activity_type: ActivityType
    activity_subtype: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("entry_date")
    @classmethod
    def check_entry_date(cls, v: str) -> str:
        if not is_valid_iso_date(v):
            raise PydanticCustomError("date_format", "Invalid date format")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time_format(cls, v: str) -> str:
        if not TIME_RE.fullmatch(v):
            raise PydanticCustomError("time_format", "Invalid time format")
        return v

    @field_validator("end_time")
    @classmethod
    def check_end_after_start(cls, v: str, info: ValidationInfo) -> str:
        start = info.data.get("start_time")
        # start_time already failed its own check
        if start is None:
            return v
        if to_minutes(v) <= to_minutes(start):
            raise PydanticCustomError("end_before_start", "End time must be after start time")
        return v

    @field_validator("activity_subtype")
    @classmethod
    def check_subtype(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v, 100, "Activity subtype")

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v, 1000, "Notes")

    @property
    def entry_day(self) -> date:
        return date.fromisoformat(self.entry_date)


class TimesheetEntryCreateRequest(TimesheetEntryCreate):
    submit: bool = False


class TimesheetEntry(BaseModel):
    id: str
    user_id: str
    department_id: Optional[str] = None
    entry_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    activity_type: ActivityType
    activity_subtype: Optional[str] = None
    notes: Optional[str] = None
    status: EntryStatus
    approver_id: Optional[str] = None
    approver_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApprovalDecision(BaseModel):
    approve: bool
    approver_notes: Optional[str] = None

    @field_validator("approver_notes")
    @classmethod
    def check_notes(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v, 500, "Approver notes")


class ImportFailure(BaseModel):
    row: int
    errors: List[str]


class ImportResult(BaseModel):
    success: int
    failed: int
    invalid_rows: List[ImportFailure]
    batch_errors: List[Dict[str, object]]


def validate_timesheet_entry(payload: dict) -> Dict[str, str]:
    """
    Field-scoped validation errors for a candidate entry, first message per field.
    An empty dict means the entry is valid.
    """
    try:
        TimesheetEntryCreate.model_validate(payload)
    except PydanticValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            errors.setdefault(field, error["msg"])
        return errors
    return {}
