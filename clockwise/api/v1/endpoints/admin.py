# clockwise/api/v1/endpoints/admin.py
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.config import settings
from clockwise.core.exceptions import user_error_message
from clockwise.db import models, session
from clockwise.db.repositories import SqlDirectoryRepository, SqlLabelRepository, SqlUserSettingsRepository
from clockwise.schemas import organization as org_schema
from clockwise.services import categories, directory, labels
from clockwise.services.reporting import effective_daily_target

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_organization(admin: security.CurrentUser) -> str:
    if not admin.organization_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admin has no organization assigned")
    return admin.organization_id


def _get_own_organization(db: Session, admin: security.CurrentUser, organization_id: str) -> models.Organization:
    org = None
    if organization_id == admin.organization_id:
        org = db.query(models.Organization).filter(models.Organization.id == organization_id).first()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


def _require_member(db: Session, organization_id: str, user_id: str):
    role_row = db.query(models.UserRole).filter(
        models.UserRole.user_id == user_id, models.UserRole.organization_id == organization_id
    ).first()
    if not role_row:
        raise HTTPException(status_code=404, detail="User not found")


def _commit_or_conflict(db: Session, context: str):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=user_error_message(exc, context))


def _get_department(db: Session, organization_id: str, department_id: str) -> models.Department:
    department = db.query(models.Department).filter(
        models.Department.id == department_id, models.Department.organization_id == organization_id
    ).first()
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


def _get_program(db: Session, organization_id: str, program_id: str) -> models.Program:
    program = db.query(models.Program).join(models.Department).filter(
        models.Program.id == program_id, models.Department.organization_id == organization_id
    ).first()
    if not program:
        raise HTTPException(status_code=404, detail="Program not found")
    return program


def _get_category(db: Session, organization_id: str, category_id: str) -> models.ActivityCategory:
    category = db.query(models.ActivityCategory).filter(
        models.ActivityCategory.id == category_id, models.ActivityCategory.organization_id == organization_id
    ).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


# --- Organizations ---

@router.get("/organizations", response_model=List[org_schema.Organization])
def list_organizations(
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    return SqlDirectoryRepository(db).list_organizations()


@router.post("/organizations", response_model=org_schema.Organization, status_code=status.HTTP_201_CREATED)
def create_organization(
    org_in: org_schema.OrganizationCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    if db.query(models.Organization).filter(models.Organization.code == org_in.code).first():
        raise HTTPException(status_code=409, detail="Organization code already exists")
    org = models.Organization(name=org_in.name, code=org_in.code)
    db.add(org)
    _commit_or_conflict(db, "organization")
    db.refresh(org)
    logger.info("Organization %s created by %s", org.code, admin.id)
    return org


@router.put("/organizations/{organization_id}", response_model=org_schema.Organization)
def update_organization(
    organization_id: str,
    org_in: org_schema.OrganizationCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    org = _get_own_organization(db, admin, organization_id)
    clash = db.query(models.Organization).filter(
        models.Organization.code == org_in.code, models.Organization.id != organization_id
    ).first()
    if clash:
        raise HTTPException(status_code=409, detail="Organization code already exists")
    org.name = org_in.name
    org.code = org_in.code
    _commit_or_conflict(db, "organization")
    db.refresh(org)
    return org


@router.delete("/organizations/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_organization(
    organization_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Refuses to delete an organization that still has departments. """
    org = _get_own_organization(db, admin, organization_id)
    department_count = db.query(models.Department).filter(models.Department.organization_id == organization_id).count()
    if department_count > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete organization. It still has {department_count} departments."
        )
    db.delete(org)
    db.commit()
    return


# --- Departments ---

@router.get("/departments", response_model=List[org_schema.Department])
def list_departments(
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    return directory.list_departments(SqlDirectoryRepository(db), _require_organization(admin))


@router.post("/departments", response_model=org_schema.Department, status_code=status.HTTP_201_CREATED)
def create_department(
    dept_in: org_schema.DepartmentCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    department = models.Department(name=dept_in.name, code=dept_in.code, organization_id=_require_organization(admin))
    db.add(department)
    db.commit()
    db.refresh(department)
    return department


@router.put("/departments/{department_id}", response_model=org_schema.Department)
def update_department(
    department_id: str,
    dept_in: org_schema.DepartmentCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    department = _get_department(db, _require_organization(admin), department_id)
    department.name = dept_in.name
    department.code = dept_in.code
    db.commit()
    db.refresh(department)
    return department


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    department = _get_department(db, _require_organization(admin), department_id)
    program_count = db.query(models.Program).filter(models.Program.department_id == department_id).count()
    if program_count > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete department. It still has {program_count} programs."
        )
    db.delete(department)
    db.commit()
    return


# --- Programs ---

@router.get("/programs", response_model=List[org_schema.Program])
def list_programs(
    department_id: Optional[str] = None,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Programs across the admin's organization, or of one department. """
    query = db.query(models.Program).join(models.Department).filter(
        models.Department.organization_id == _require_organization(admin)
    )
    if department_id:
        query = query.filter(models.Program.department_id == department_id)
    return query.order_by(models.Program.name).all()


@router.post("/programs", response_model=org_schema.Program, status_code=status.HTTP_201_CREATED)
def create_program(
    program_in: org_schema.ProgramCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    _get_department(db, _require_organization(admin), program_in.department_id)
    program = models.Program(name=program_in.name, code=program_in.code, department_id=program_in.department_id)
    db.add(program)
    db.commit()
    db.refresh(program)
    return program


@router.put("/programs/{program_id}", response_model=org_schema.Program)
def update_program(
    program_id: str,
    program_in: org_schema.ProgramCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    organization_id = _require_organization(admin)
    program = _get_program(db, organization_id, program_id)
    _get_department(db, organization_id, program_in.department_id)
    program.name = program_in.name
    program.code = program_in.code
    program.department_id = program_in.department_id
    db.commit()
    db.refresh(program)
    return program


@router.delete("/programs/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_program(
    program_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    program = _get_program(db, _require_organization(admin), program_id)
    db.delete(program)
    db.commit()
    return


# --- Labels ---

@router.get("/labels", response_model=org_schema.LabelsResponse)
def read_labels(
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    resolver = labels.load_labels(SqlLabelRepository(db), admin.organization_id)
    return org_schema.LabelsResponse(labels=resolver.labels, using_defaults=resolver.using_defaults)


@router.put("/labels", response_model=org_schema.LabelsResponse)
def update_labels(
    labels_in: org_schema.OrganizationLabels,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    row = SqlLabelRepository(db).save_labels(_require_organization(admin), labels_in)
    return org_schema.LabelsResponse(labels=org_schema.OrganizationLabels.model_validate(row), using_defaults=False)


@router.delete("/labels", response_model=org_schema.LabelsResponse)
def reset_labels(
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Drops the custom labels; the organization falls back to the defaults. """
    SqlLabelRepository(db).delete_labels(_require_organization(admin))
    return org_schema.LabelsResponse(labels=org_schema.OrganizationLabels(), using_defaults=True)


# --- Activity categories ---

@router.get("/categories", response_model=List[org_schema.ActivityCategory])
def list_categories(
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Every configured category of the organization, active or not. """
    return db.query(models.ActivityCategory).filter(
        models.ActivityCategory.organization_id == _require_organization(admin)
    ).order_by(models.ActivityCategory.display_order, models.ActivityCategory.name).all()


@router.post("/categories", response_model=org_schema.ActivityCategory, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: org_schema.ActivityCategoryCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    organization_id = _require_organization(admin)
    if category_in.department_id:
        _get_department(db, organization_id, category_in.department_id)
    category = models.ActivityCategory(
        organization_id=organization_id,
        code=categories.category_code(category_in.name),
        **category_in.model_dump(),
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@router.put("/categories/{category_id}", response_model=org_schema.ActivityCategory)
def update_category(
    category_id: str,
    category_in: org_schema.ActivityCategoryCreate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    organization_id = _require_organization(admin)
    category = _get_category(db, organization_id, category_id)
    if category_in.department_id:
        _get_department(db, organization_id, category_in.department_id)
    for field, value in category_in.model_dump().items():
        setattr(category, field, value)
    category.code = categories.category_code(category_in.name)
    db.commit()
    db.refresh(category)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    category = _get_category(db, _require_organization(admin), category_id)
    db.delete(category)
    db.commit()
    return


# --- User settings ---

def _settings_response(user_id: str, row) -> org_schema.UserSettings:
    return org_schema.UserSettings(
        user_id=user_id,
        daily_target_minutes=row.daily_target_minutes if row else None,
        effective_daily_target_minutes=effective_daily_target(row, settings.DEFAULT_DAILY_TARGET_MINUTES),
    )


@router.get("/settings", response_model=Dict[str, org_schema.UserSettings])
def read_department_settings(
    department_id: Optional[str] = None,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Daily targets keyed by user id for every member of a department (or the whole organization). """
    members = directory.list_members(
        SqlDirectoryRepository(db), organization_id=_require_organization(admin), department_id=department_id
    )
    member_ids = [m.id for m in members]
    rows = SqlUserSettingsRepository(db).get_many(member_ids)
    return {user_id: _settings_response(user_id, rows.get(user_id)) for user_id in member_ids}


@router.get("/settings/{user_id}", response_model=org_schema.UserSettings)
def read_user_settings(
    user_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    _require_member(db, _require_organization(admin), user_id)
    return _settings_response(user_id, SqlUserSettingsRepository(db).get(user_id))


@router.put("/settings/{user_id}", response_model=org_schema.UserSettings)
def update_user_settings(
    user_id: str,
    settings_in: org_schema.UserSettingsUpdate,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    _require_member(db, _require_organization(admin), user_id)
    row = SqlUserSettingsRepository(db).set_daily_target(user_id, settings_in.daily_target_minutes)
    return _settings_response(user_id, row)


@router.delete("/settings/{user_id}", response_model=org_schema.UserSettings)
def reset_user_settings(
    user_id: str,
    db: Session = Depends(session.get_db),
    admin: security.CurrentUser = Depends(security.get_current_org_admin)
):
    """ Back to the organization default target. """
    _require_member(db, _require_organization(admin), user_id)
    row = SqlUserSettingsRepository(db).set_daily_target(user_id, None)
    return _settings_response(user_id, row)
