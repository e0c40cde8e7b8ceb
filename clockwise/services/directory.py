# clockwise/services/directory.py
# Pick-lists built by joining profiles, roles and departments.
import logging
from typing import Iterable, List, Optional, Protocol, Sequence

from pydantic import BaseModel

from clockwise.core.exceptions import ValidationError
from clockwise.services.roles import Role, to_stored_role

logger = logging.getLogger(__name__)

UNKNOWN_DEPARTMENT = "N/A"


class DirectoryMember(BaseModel):
    id: str
    full_name: str
    department_name: str


class DirectoryRepository(Protocol):
    def list_active_profiles(self) -> Sequence:
        raise NotImplementedError

    def list_roles(
        self,
        user_ids: Sequence[str],
        role: str,
        organization_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> Sequence:
        raise NotImplementedError

    def list_departments(self, department_ids: Sequence[str]) -> Sequence:
        raise NotImplementedError

    def list_organization_departments(self, organization_id: Optional[str]) -> Sequence:
        raise NotImplementedError

    def list_department_programs(self, department_id: str) -> Sequence:
        raise NotImplementedError


def merge_member_directory(profiles: Iterable, roles: Iterable, departments: Iterable) -> List[DirectoryMember]:
    """
    Joins the three collections on id. Profiles keep the order they came in;
    a profile with no matching role row is left out.
    """
    department_by_user = {role.user_id: role.department_id for role in roles}
    department_names = {dept.id: dept.name for dept in departments}

    members = []
    for profile in profiles:
        if profile.id not in department_by_user:
            continue
        department_id = department_by_user[profile.id]
        members.append(DirectoryMember(
            id=profile.id,
            full_name=profile.full_name,
            department_name=department_names.get(department_id, UNKNOWN_DEPARTMENT) if department_id else UNKNOWN_DEPARTMENT,
        ))
    return members


def list_members(
    repository: DirectoryRepository,
    role: Role = Role.MEMBER,
    organization_id: Optional[str] = None,
    department_id: Optional[str] = None,
) -> List[DirectoryMember]:
    """Members holding `role`, alphabetical by name. Any fetch failure yields an empty list."""
    try:
        profiles = list(repository.list_active_profiles())
        roles = list(repository.list_roles(
            [p.id for p in profiles],
            to_stored_role(role).value,
            organization_id=organization_id,
            department_id=department_id,
        ))
        department_ids = sorted({r.department_id for r in roles if r.department_id})
        departments = list(repository.list_departments(department_ids))
    except Exception:
        logger.exception("Error fetching %s directory", role.value)
        return []
    return merge_member_directory(profiles, roles, departments)


def list_departments(repository: DirectoryRepository, organization_id: Optional[str]) -> list:
    try:
        return list(repository.list_organization_departments(organization_id))
    except Exception:
        logger.exception("Error fetching departments for organization %s", organization_id)
        return []


def list_programs(repository: DirectoryRepository, department_id: Optional[str]) -> list:
    """Programs of one department. Never fetched without a department."""
    if not department_id:
        raise ValidationError({"department_id": "A department is required to list programs"})
    try:
        return list(repository.list_department_programs(department_id))
    except Exception:
        logger.exception("Error fetching programs for department %s", department_id)
        return []
