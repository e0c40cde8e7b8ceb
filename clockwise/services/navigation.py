# clockwise/services/navigation.py
# Sidebar items and status badges per role. This only decides what the client
# shows; every endpoint still checks the caller's role itself.
from typing import Dict, List, Optional

from pydantic import BaseModel

from clockwise.services.roles import Role


class NavItem(BaseModel):
    to: str
    icon: str
    label: str


class StatusBadge(BaseModel):
    status: str
    label: str
    variant: str


DASHBOARD = NavItem(to="/dashboard", icon="clock", label="Dashboard")

ROLE_MENUS: Dict[Role, List[NavItem]] = {
    Role.MEMBER: [
        NavItem(to="/timesheet", icon="file-text", label="Timesheet"),
        NavItem(to="/bulk-import", icon="upload", label="Bulk Upload"),
    ],
    Role.MANAGER: [
        NavItem(to="/approvals", icon="clipboard-check", label="Approvals"),
        NavItem(to="/team", icon="users-round", label="Team"),
    ],
    Role.ORG_ADMIN: [
        NavItem(to="/organizations", icon="building", label="Organizations"),
        NavItem(to="/programs", icon="folder-kanban", label="Programs"),
        NavItem(to="/departments", icon="layers", label="Departments"),
        NavItem(to="/users", icon="users", label="Users"),
        NavItem(to="/reports", icon="bar-chart", label="Reports"),
        NavItem(to="/bulk-import", icon="upload", label="Bulk Import"),
        NavItem(to="/settings", icon="settings", label="Settings"),
    ],
    Role.PROGRAM_MANAGER: [
        NavItem(to="/programs", icon="folder-kanban", label="Programs"),
        NavItem(to="/departments", icon="layers", label="Departments"),
        NavItem(to="/reports", icon="bar-chart", label="Reports"),
    ],
}

STATUS_BADGES: Dict[str, StatusBadge] = {
    "draft": StatusBadge(status="draft", label="Draft", variant="muted"),
    "submitted": StatusBadge(status="submitted", label="Pending", variant="warning"),
    "approved": StatusBadge(status="approved", label="Approved", variant="success"),
    "rejected": StatusBadge(status="rejected", label="Rejected", variant="destructive"),
}


def navigation_for(role: Optional[Role]) -> List[NavItem]:
    return [DASHBOARD] + list(ROLE_MENUS.get(role, []))


def status_badge(status: str) -> StatusBadge:
    return STATUS_BADGES[status]
