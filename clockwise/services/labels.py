# clockwise/services/labels.py
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from clockwise.schemas.organization import OrganizationLabels
from clockwise.services.roles import Role, to_display_role

logger = logging.getLogger(__name__)

ROLE_LABEL_FIELDS = {
    Role.ORG_ADMIN: "role_org_admin",
    Role.PROGRAM_MANAGER: "role_program_manager",
    Role.MANAGER: "role_manager",
    Role.MEMBER: "role_member",
}


class LabelRepository(Protocol):
    def get_labels(self, organization_id: str) -> Optional[object]:
        raise NotImplementedError


@dataclass
class LabelResolver:
    """Turns role codes and entity keys into the organization's terminology."""

    labels: OrganizationLabels = field(default_factory=OrganizationLabels)
    using_defaults: bool = True

    def role_label(self, role: str) -> str:
        try:
            display = Role(role)
        except ValueError:
            display = to_display_role(role)
        if display is None:
            return role
        return getattr(self.labels, ROLE_LABEL_FIELDS[display])

    def entity_label(self, entity: str, plural: bool = False) -> str:
        if entity == "department":
            return self.labels.entity_department_plural if plural else self.labels.entity_department
        if entity == "program":
            return self.labels.entity_program_plural if plural else self.labels.entity_program
        raise ValueError(f"Unknown entity: {entity}")


def load_labels(repository: LabelRepository, organization_id: Optional[str]) -> LabelResolver:
    """
    Fetches the organization's label row once. A missing organization, a missing
    row or a failing fetch all fall back to the built-in defaults.
    """
    if not organization_id:
        return LabelResolver()
    try:
        row = repository.get_labels(organization_id)
    except Exception:
        logger.exception("Error fetching labels for organization %s, using defaults", organization_id)
        return LabelResolver()
    if row is None:
        return LabelResolver()
    return LabelResolver(labels=OrganizationLabels.model_validate(row), using_defaults=False)
