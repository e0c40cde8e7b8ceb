from types import SimpleNamespace

import pytest

from clockwise.schemas.organization import OrganizationLabels
from clockwise.services import labels, roles


class FakeLabelRepo:
    def __init__(self, row=None, fail=False):
        self._row = row
        self._fail = fail
        self.calls = 0

    def get_labels(self, organization_id):
        self.calls += 1
        if self._fail:
            raise RuntimeError("timeout")
        return self._row


def _row(**overrides):
    values = OrganizationLabels().model_dump()
    values.update(overrides)
    return SimpleNamespace(**values)


def test_defaults_without_organization():
    repo = FakeLabelRepo(row=_row(role_manager="HOD"))
    resolver = labels.load_labels(repo, None)
    assert resolver.using_defaults
    assert repo.calls == 0
    assert resolver.role_label("manager") == "Manager"


def test_defaults_on_missing_row_or_failure():
    assert labels.load_labels(FakeLabelRepo(row=None), "org").using_defaults
    assert labels.load_labels(FakeLabelRepo(fail=True), "org").role_label("member") == "Member"


def test_organization_labels_override_defaults():
    resolver = labels.load_labels(FakeLabelRepo(row=_row(role_manager="HOD", entity_program_plural="Degrees")), "org")

    assert not resolver.using_defaults
    assert resolver.role_label("manager") == "HOD"
    assert resolver.role_label("hod") == "HOD"
    assert resolver.entity_label("program", plural=True) == "Degrees"
    assert resolver.entity_label("department") == "Department"


def test_unknown_entity_is_rejected():
    with pytest.raises(ValueError):
        labels.LabelResolver().entity_label("faculty")


def test_unknown_role_is_returned_unchanged():
    assert labels.LabelResolver().role_label("superuser") == "superuser"


@pytest.mark.parametrize("stored, display", [
    ("org_admin", roles.Role.ORG_ADMIN),
    ("program_manager", roles.Role.PROGRAM_MANAGER),
    ("hod", roles.Role.MANAGER),
    ("faculty", roles.Role.MEMBER),
])
def test_role_mapping_is_bidirectional(stored, display):
    assert roles.to_display_role(stored) is display
    assert roles.to_stored_role(display).value == stored


def test_unknown_stored_role_has_no_display_role():
    assert roles.to_display_role("admin") is None
    assert roles.to_display_role(None) is None
