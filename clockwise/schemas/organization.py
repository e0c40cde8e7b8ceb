# clockwise/schemas/organization.py
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

CODE_PATTERN = re.compile(r"[A-Z0-9_-]+")


def _check_name(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("name_required", "{label} name is required", {"label": label})
    if len(value) > 100:
        raise PydanticCustomError("name_too_long", "Name must be less than 100 characters")
    return value


def _check_code(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("code_required", "{label} code is required", {"label": label})
    if len(value) > 10:
        raise PydanticCustomError("code_too_long", "Code must be less than 10 characters")
    if not CODE_PATTERN.fullmatch(value):
        raise PydanticCustomError(
            "code_format",
            "Code must contain only uppercase letters, numbers, hyphens, and underscores",
        )
    return value


class OrganizationCreate(BaseModel):
    name: str
    code: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v, "Organization")

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_code(v, "Organization")


class Organization(OrganizationCreate):
    id: str

    class Config:
        from_attributes = True


class DepartmentCreate(BaseModel):
    name: str
    code: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v, "Department")

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_code(v, "Department")


class Department(DepartmentCreate):
    id: str
    organization_id: Optional[str] = None

    class Config:
        from_attributes = True


class ProgramCreate(BaseModel):
    name: str
    code: str
    department_id: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v, "Program")

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_code(v, "Program")


class Program(ProgramCreate):
    id: str

    class Config:
        from_attributes = True


class OrganizationLabels(BaseModel):
    role_org_admin: str = "Organization Admin"
    role_program_manager: str = "Program Manager"
    role_manager: str = "Manager"
    role_member: str = "Member"
    entity_department: str = "Department"
    entity_department_plural: str = "Departments"
    entity_program: str = "Program"
    entity_program_plural: str = "Programs"

    class Config:
        from_attributes = True


class LabelsResponse(BaseModel):
    labels: OrganizationLabels
    using_defaults: bool


class ActivityCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    department_id: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class ActivityCategory(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    organization_id: Optional[str] = None
    department_id: Optional[str] = None
    display_order: int = 0
    is_active: bool = True

    class Config:
        from_attributes = True


class UserSettingsUpdate(BaseModel):
    daily_target_minutes: Optional[int] = Field(default=None, ge=0, le=24 * 60)


class UserSettings(BaseModel):
    user_id: str
    daily_target_minutes: Optional[int] = None
    effective_daily_target_minutes: int
