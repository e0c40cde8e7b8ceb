# clockwise/db/repositories.py
# SQLAlchemy-backed repositories. Services depend on the Protocols they declare, not on these classes.
from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from clockwise.db import models
from clockwise.schemas.organization import OrganizationLabels


class SqlLabelRepository:
    def __init__(self, db: Session):
        self._db = db

    def get_labels(self, organization_id: str) -> Optional[models.OrganizationLabel]:
        return (
            self._db.query(models.OrganizationLabel)
            .filter(models.OrganizationLabel.organization_id == organization_id)
            .first()
        )

    def save_labels(self, organization_id: str, labels: OrganizationLabels) -> models.OrganizationLabel:
        row = self.get_labels(organization_id)
        if row is None:
            row = models.OrganizationLabel(organization_id=organization_id)
            self._db.add(row)
        for field, value in labels.model_dump().items():
            setattr(row, field, value)
        self._db.commit()
        self._db.refresh(row)
        return row

    def delete_labels(self, organization_id: str) -> bool:
        deleted = (
            self._db.query(models.OrganizationLabel)
            .filter(models.OrganizationLabel.organization_id == organization_id)
            .delete()
        )
        self._db.commit()
        return deleted > 0


class SqlDirectoryRepository:
    def __init__(self, db: Session):
        self._db = db

    def list_active_profiles(self) -> List[models.Profile]:
        return (
            self._db.query(models.Profile)
            .filter(models.Profile.is_active.is_(True))
            .order_by(models.Profile.full_name)
            .all()
        )

    def list_roles(
        self,
        user_ids: Sequence[str],
        role: str,
        organization_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> List[models.UserRole]:
        if not user_ids:
            return []
        query = self._db.query(models.UserRole).filter(
            models.UserRole.user_id.in_(list(user_ids)),
            models.UserRole.role == role,
        )
        if organization_id:
            query = query.filter(models.UserRole.organization_id == organization_id)
        if department_id:
            query = query.filter(models.UserRole.department_id == department_id)
        return query.all()

    def list_departments(self, department_ids: Sequence[str]) -> List[models.Department]:
        if not department_ids:
            return []
        return self._db.query(models.Department).filter(models.Department.id.in_(list(department_ids))).all()

    def list_organization_departments(self, organization_id: Optional[str]) -> List[models.Department]:
        query = self._db.query(models.Department)
        if organization_id:
            query = query.filter(models.Department.organization_id == organization_id)
        return query.order_by(models.Department.name).all()

    def list_department_programs(self, department_id: str) -> List[models.Program]:
        return (
            self._db.query(models.Program)
            .filter(models.Program.department_id == department_id)
            .order_by(models.Program.name)
            .all()
        )

    def list_organizations(self) -> List[models.Organization]:
        return self._db.query(models.Organization).order_by(models.Organization.name).all()


class SqlCategoryRepository:
    def __init__(self, db: Session):
        self._db = db

    def list_active(self, organization_id: Optional[str]) -> List[models.ActivityCategory]:
        query = self._db.query(models.ActivityCategory).filter(models.ActivityCategory.is_active.is_(True))
        if organization_id:
            query = query.filter(models.ActivityCategory.organization_id == organization_id)
        return query.order_by(models.ActivityCategory.display_order, models.ActivityCategory.name).all()


class SqlUserSettingsRepository:
    def __init__(self, db: Session):
        self._db = db

    def get(self, user_id: str) -> Optional[models.UserSettings]:
        return self._db.query(models.UserSettings).filter(models.UserSettings.user_id == user_id).first()

    def get_many(self, user_ids: Sequence[str]) -> Dict[str, models.UserSettings]:
        if not user_ids:
            return {}
        rows = self._db.query(models.UserSettings).filter(models.UserSettings.user_id.in_(list(user_ids))).all()
        return {row.user_id: row for row in rows}

    def set_daily_target(self, user_id: str, minutes: Optional[int]) -> models.UserSettings:
        row = self.get(user_id)
        if row is None:
            row = models.UserSettings(user_id=user_id)
            self._db.add(row)
        row.daily_target_minutes = minutes
        self._db.commit()
        self._db.refresh(row)
        return row


class SqlTimesheetRepository:
    def __init__(self, db: Session):
        self._db = db

    def fetch_entries(
        self,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        department_id: Optional[str] = None,
        user_id: Optional[str] = None,
        user_ids: Optional[Sequence[str]] = None,
        status: Optional[str] = None,
        activity_type: Optional[str] = None,
    ) -> List[models.TimesheetEntry]:
        """ "all" for any of the string filters means no filter. """
        query = self._db.query(models.TimesheetEntry)
        if date_from:
            query = query.filter(models.TimesheetEntry.entry_date >= date_from)
        if date_to:
            query = query.filter(models.TimesheetEntry.entry_date <= date_to)
        if department_id and department_id != "all":
            query = query.filter(models.TimesheetEntry.department_id == department_id)
        if user_id and user_id != "all":
            query = query.filter(models.TimesheetEntry.user_id == user_id)
        if user_ids is not None:
            query = query.filter(models.TimesheetEntry.user_id.in_(list(user_ids)))
        if status and status != "all":
            query = query.filter(models.TimesheetEntry.status == status)
        if activity_type and activity_type != "all":
            query = query.filter(models.TimesheetEntry.activity_type == activity_type)
        return query.order_by(models.TimesheetEntry.entry_date.desc(), models.TimesheetEntry.start_time).all()
