# clockwise/api/v1/endpoints/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.config import settings
from clockwise.db import session
from clockwise.db.repositories import SqlCategoryRepository, SqlLabelRepository, SqlUserSettingsRepository
from clockwise.schemas import organization as org_schema
from clockwise.services import categories, labels, navigation
from clockwise.services.reporting import effective_daily_target

router = APIRouter()


class Me(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    role_label: Optional[str] = None
    organization_id: Optional[str] = None
    department_id: Optional[str] = None


class NavigationResponse(BaseModel):
    items: List[navigation.NavItem]
    status_badges: List[navigation.StatusBadge]


@router.get("/me", response_model=Me)
def read_user_me(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """
    Get the details for the currently logged-in user.
    """
    resolver = labels.load_labels(SqlLabelRepository(db), current_user.organization_id)
    role = current_user.role.value if current_user.role else None
    return Me(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=role,
        role_label=resolver.role_label(role) if role else None,
        organization_id=current_user.organization_id,
        department_id=current_user.department_id,
    )


@router.get("/me/navigation", response_model=NavigationResponse)
def read_navigation(current_user: security.CurrentUser = Depends(security.get_current_user)):
    """ Sidebar items for the caller's role. Hiding an item does not protect its endpoint. """
    return NavigationResponse(
        items=navigation.navigation_for(current_user.role),
        status_badges=list(navigation.STATUS_BADGES.values()),
    )


@router.get("/me/labels", response_model=org_schema.LabelsResponse)
def read_labels(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    resolver = labels.load_labels(SqlLabelRepository(db), current_user.organization_id)
    return org_schema.LabelsResponse(labels=resolver.labels, using_defaults=resolver.using_defaults)


@router.get("/me/categories", response_model=List[org_schema.ActivityCategory])
def read_categories(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """ Activity categories that apply to the caller's department. """
    return categories.load_categories(
        SqlCategoryRepository(db), current_user.organization_id, current_user.department_id
    )


@router.get("/me/settings", response_model=org_schema.UserSettings)
def read_settings(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    row = SqlUserSettingsRepository(db).get(current_user.id)
    return org_schema.UserSettings(
        user_id=current_user.id,
        daily_target_minutes=row.daily_target_minutes if row else None,
        effective_daily_target_minutes=effective_daily_target(row, settings.DEFAULT_DAILY_TARGET_MINUTES),
    )
