# clockwise/api/v1/endpoints/directory.py
# Pick-lists for the select boxes.
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clockwise.core import security
from clockwise.core.exceptions import ValidationError, to_http_exception
from clockwise.db import session
from clockwise.db.repositories import SqlDirectoryRepository
from clockwise.schemas import organization as org_schema
from clockwise.services import directory
from clockwise.services.roles import Role

router = APIRouter()


@router.get("/members", response_model=List[directory.DirectoryMember])
def list_members(
    department_id: Optional[str] = None,
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """ Active members of the caller's organization. Managers only see their own department. """
    if current_user.role == Role.MANAGER:
        department_id = current_user.department_id
        if not department_id:
            return []
    elif current_user.role not in (Role.ORG_ADMIN, Role.PROGRAM_MANAGER):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions for this resource")
    return directory.list_members(
        SqlDirectoryRepository(db),
        organization_id=current_user.organization_id,
        department_id=department_id,
    )


@router.get("/departments", response_model=List[org_schema.Department])
def list_departments(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    return directory.list_departments(SqlDirectoryRepository(db), current_user.organization_id)


@router.get("/programs", response_model=List[org_schema.Program])
def list_programs(
    department_id: Optional[str] = None,
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_user)
):
    """ Programs of a single department; the department is required. """
    try:
        return directory.list_programs(SqlDirectoryRepository(db), department_id)
    except ValidationError as exc:
        raise to_http_exception(exc)


@router.get("/organizations", response_model=List[org_schema.Organization])
def list_organizations(
    db: Session = Depends(session.get_db),
    current_user: security.CurrentUser = Depends(security.get_current_report_viewer)
):
    return SqlDirectoryRepository(db).list_organizations()
