# clockwise/services/roles.py
# Roles are stored under legacy codes and shown under display codes.
from enum import Enum
from typing import Dict, Optional


class Role(str, Enum):
    """Role as the application talks about it."""

    ORG_ADMIN = "org_admin"
    PROGRAM_MANAGER = "program_manager"
    MANAGER = "manager"
    MEMBER = "member"


class StoredRole(str, Enum):
    """Role code as written to the user_roles table."""

    ORG_ADMIN = "org_admin"
    PROGRAM_MANAGER = "program_manager"
    HOD = "hod"
    FACULTY = "faculty"


STORED_TO_DISPLAY: Dict[StoredRole, Role] = {
    StoredRole.ORG_ADMIN: Role.ORG_ADMIN,
    StoredRole.PROGRAM_MANAGER: Role.PROGRAM_MANAGER,
    StoredRole.HOD: Role.MANAGER,
    StoredRole.FACULTY: Role.MEMBER,
}

DISPLAY_TO_STORED: Dict[Role, StoredRole] = {display: stored for stored, display in STORED_TO_DISPLAY.items()}

if set(STORED_TO_DISPLAY) != set(StoredRole) or set(DISPLAY_TO_STORED) != set(Role):
    raise RuntimeError("Role mapping must cover every stored and display role")


def to_display_role(stored: Optional[str]) -> Optional[Role]:
    if not stored:
        return None
    try:
        return STORED_TO_DISPLAY[StoredRole(stored)]
    except ValueError:
        return None


def to_stored_role(display) -> StoredRole:
    return DISPLAY_TO_STORED[Role(display)]
