# clockwise/services/categories.py
import logging
import re
from typing import List, Optional, Protocol, Sequence

from clockwise.schemas.organization import ActivityCategory

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Class", "Teaching/lecture sessions"),
    ("Quiz", "Quizzes and assessments"),
    ("Invigilation", "Exam invigilation/proctoring"),
    ("Admin", "Administrative tasks"),
    ("Other", "Miscellaneous activities"),
)


class CategoryRepository(Protocol):
    def list_active(self, organization_id: Optional[str]) -> Sequence:
        raise NotImplementedError


def category_code(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip().lower())


def default_categories() -> List[ActivityCategory]:
    return [
        ActivityCategory(id=str(i), name=name, code=category_code(name), description=description, display_order=i)
        for i, (name, description) in enumerate(DEFAULT_CATEGORIES, start=1)
    ]


def resolve_categories(rows: Sequence, department_id: Optional[str] = None) -> List[ActivityCategory]:
    """
    Department-specific categories replace the organization-wide ones when the
    department has any; they are not merged.
    """
    org_wide = [r for r in rows if not r.department_id]
    chosen = org_wide
    if department_id:
        own = [r for r in rows if r.department_id == department_id]
        if own:
            chosen = own
    chosen = sorted(chosen, key=lambda r: (r.display_order, r.name))
    return [ActivityCategory.model_validate(r) for r in chosen]


def load_categories(repository: CategoryRepository, organization_id: Optional[str],
                    department_id: Optional[str] = None) -> List[ActivityCategory]:
    try:
        rows = list(repository.list_active(organization_id))
    except Exception:
        logger.exception("Error loading activity categories, using defaults")
        return default_categories()
    categories = resolve_categories(rows, department_id)
    return categories or default_categories()
