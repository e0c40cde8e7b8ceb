# clockwise/db/models.py
import uuid

from sqlalchemy import ( Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text,
                         UniqueConstraint, func )
from sqlalchemy.orm import relationship
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class Organization(Base):
    __tablename__ = "organizations"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    code = Column(String(10), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    departments = relationship("Department", back_populates="organization")


class Department(Base):
    __tablename__ = "departments"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    code = Column(String(10), nullable=False, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    organization = relationship("Organization", back_populates="departments")
    programs = relationship("Program", back_populates="department")


class Program(Base):
    __tablename__ = "programs"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    code = Column(String(10), nullable=False, index=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    department = relationship("Department", back_populates="programs")


class Profile(Base):
    """One row per auth identity; the id is the auth provider's user id."""
    __tablename__ = "profiles"
    id = Column(String(36), primary_key=True)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    avatar_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserRole(Base):
    __tablename__ = "user_roles"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True)
    program_id = Column(String(36), ForeignKey("programs.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    __table_args__ = ( CheckConstraint("role IN ('org_admin', 'program_manager', 'hod', 'faculty')"), )


class UserDepartment(Base):
    __tablename__ = "user_departments"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=False)


class UserProgram(Base):
    __tablename__ = "user_programs"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    program_id = Column(String(36), ForeignKey("programs.id"), nullable=False)


class UserSettings(Base):
    __tablename__ = "user_settings"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), unique=True, nullable=False, index=True)
    daily_target_minutes = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ActivityCategory(Base):
    __tablename__ = "activity_categories"
    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True)
    name = Column(String(100), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class OrganizationLabel(Base):
    __tablename__ = "organization_labels"
    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False)
    role_org_admin = Column(String(50), nullable=False)
    role_program_manager = Column(String(50), nullable=False)
    role_manager = Column(String(50), nullable=False)
    role_member = Column(String(50), nullable=False)
    entity_department = Column(String(50), nullable=False)
    entity_department_plural = Column(String(50), nullable=False)
    entity_program = Column(String(50), nullable=False)
    entity_program_plural = Column(String(50), nullable=False)
    __table_args__ = ( UniqueConstraint("organization_id"), )


class TimesheetEntry(Base):
    __tablename__ = "timesheet_entries"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True, index=True)
    entry_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    activity_type = Column(String(20), nullable=False)
    activity_subtype = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")
    approver_id = Column(String(36), nullable=True)
    approver_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    __table_args__ = (
        CheckConstraint("activity_type IN ('class', 'quiz', 'invigilation', 'admin', 'other')"),
        CheckConstraint("status IN ('draft', 'submitted', 'approved', 'rejected')"),
        CheckConstraint("duration_minutes > 0"),
    )
