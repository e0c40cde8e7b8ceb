import time

from jose import jwt

from clockwise.core.config import settings
from clockwise.core.exceptions import user_error_message
from clockwise.db import models

from conftest import add_user, auth_header


def test_admin_endpoints_require_org_admin(client, people):
    for caller in ("member", "hod", "pm"):
        assert client.get("/api/v1/admin/departments", headers=people[caller]).status_code == 403


def test_organization_code_rules(client, people):
    created = client.post("/api/v1/admin/organizations", json={"name": "North Campus", "code": "NORTH"},
                          headers=people["admin"])
    assert created.status_code == 201

    duplicate = client.post("/api/v1/admin/organizations", json={"name": "Again", "code": "NORTH"},
                            headers=people["admin"])
    assert duplicate.status_code == 409

    for bad in ("north", "TOO-LONG-CODE", "A B", ""):
        response = client.post("/api/v1/admin/organizations", json={"name": "X", "code": bad},
                               headers=people["admin"])
        assert response.status_code == 422, bad


def test_organization_with_departments_cannot_be_deleted(client, people):
    assert client.delete("/api/v1/admin/organizations/org-1", headers=people["admin"]).status_code == 409


def test_department_and_program_crud_is_scoped_to_the_organization(client, people):
    dept = client.post("/api/v1/admin/departments", json={"name": "Maths", "code": "MATH"},
                       headers=people["admin"]).json()
    assert dept["organization_id"] == "org-1"

    program = client.post("/api/v1/admin/programs", json={"name": "BS Maths", "code": "BSM", "department_id": dept["id"]},
                          headers=people["admin"])
    assert program.status_code == 201

    listed = client.get("/api/v1/admin/programs", params={"department_id": dept["id"]}, headers=people["admin"]).json()
    assert [p["code"] for p in listed] == ["BSM"]

    missing = client.post("/api/v1/admin/programs", json={"name": "X", "code": "X", "department_id": "nope"},
                          headers=people["admin"])
    assert missing.status_code == 404

    assert client.delete(f"/api/v1/admin/departments/{dept['id']}", headers=people["admin"]).status_code == 409
    assert client.delete(f"/api/v1/admin/programs/{program.json()['id']}", headers=people["admin"]).status_code == 204
    assert client.delete(f"/api/v1/admin/departments/{dept['id']}", headers=people["admin"]).status_code == 204


def test_labels_customise_and_reset(client, people):
    assert client.get("/api/v1/users/me/labels", headers=people["hod"]).json()["using_defaults"] is True

    custom = client.put("/api/v1/admin/labels", json={"role_manager": "Head of Department"},
                        headers=people["admin"]).json()
    assert custom["using_defaults"] is False
    assert custom["labels"]["role_member"] == "Member"

    me = client.get("/api/v1/users/me", headers=people["hod"]).json()
    assert (me["role"], me["role_label"]) == ("manager", "Head of Department")

    reset = client.delete("/api/v1/admin/labels", headers=people["admin"]).json()
    assert reset["using_defaults"] is True
    assert client.get("/api/v1/users/me", headers=people["hod"]).json()["role_label"] == "Manager"


def test_department_categories_replace_organization_ones(client, people):
    client.post("/api/v1/admin/categories", json={"name": "Lecture", "display_order": 1}, headers=people["admin"])
    client.post("/api/v1/admin/categories", json={"name": "Lab Session", "department_id": "dept-cs"},
                headers=people["admin"])

    member_view = client.get("/api/v1/users/me/categories", headers=people["member"]).json()
    other_view = client.get("/api/v1/users/me/categories", headers=people["other_member"]).json()

    assert [(c["name"], c["code"]) for c in member_view] == [("Lab Session", "lab_session")]
    assert [c["name"] for c in other_view] == ["Lecture"]


def test_categories_default_when_none_configured(client, people):
    names = [c["name"] for c in client.get("/api/v1/users/me/categories", headers=people["member"]).json()]
    assert names == ["Class", "Quiz", "Invigilation", "Admin", "Other"]


def test_daily_target_update_and_reset(client, people):
    updated = client.put("/api/v1/admin/settings/fac-1", json={"daily_target_minutes": 360},
                         headers=people["admin"]).json()
    assert updated["effective_daily_target_minutes"] == 360

    assert client.get("/api/v1/users/me/settings", headers=people["member"]).json()["daily_target_minutes"] == 360

    by_department = client.get("/api/v1/admin/settings", params={"department_id": "dept-cs"},
                               headers=people["admin"]).json()
    assert list(by_department) == ["fac-1"]

    reset = client.delete("/api/v1/admin/settings/fac-1", headers=people["admin"]).json()
    assert reset["daily_target_minutes"] is None
    assert reset["effective_daily_target_minutes"] == 480

    too_big = client.put("/api/v1/admin/settings/fac-1", json={"daily_target_minutes": 2000},
                         headers=people["admin"])
    assert too_big.status_code == 422


def test_user_error_message_hides_technical_details():
    assert user_error_message(Exception("UNIQUE constraint failed: organizations.code"), "organization") == \
        "This record already exists. Please use a different value."
    assert user_error_message(Exception("insert violates foreign key"), "department") == \
        "Cannot complete this action. Related records may be in use."
    assert user_error_message(Exception("boom"), "approval") == "Failed to process approval. Please try again."
    assert user_error_message(Exception("boom"), "save settings") == "Failed to complete save settings. Please try again."


def _second_organization(db):
    db.add(models.Organization(id="org-2", name="North Campus", code="NORTH"))
    db.commit()
    add_user(db, "admin-2", "Nadia North", "org_admin", organization_id="org-2")
    return auth_header("admin-2", "admin@north.com")


def test_daily_targets_of_another_organization_are_not_found(client, db, people):
    other_admin = _second_organization(db)

    assert client.get("/api/v1/admin/settings/fac-1", headers=other_admin).status_code == 404
    assert client.put("/api/v1/admin/settings/fac-1", json={"daily_target_minutes": 1},
                      headers=other_admin).status_code == 404
    assert client.delete("/api/v1/admin/settings/fac-1", headers=other_admin).status_code == 404

    own = client.get("/api/v1/admin/settings/fac-1", headers=people["admin"]).json()
    assert own["daily_target_minutes"] is None
    assert client.get("/api/v1/admin/settings/nobody", headers=people["admin"]).status_code == 404


def test_admin_can_only_change_own_organization(client, db, people):
    other_admin = _second_organization(db)

    hijack = client.put("/api/v1/admin/organizations/org-1", json={"name": "Hijacked", "code": "HIJ"},
                        headers=other_admin)
    assert hijack.status_code == 404
    assert client.delete("/api/v1/admin/organizations/org-1", headers=other_admin).status_code == 404

    org = db.query(models.Organization).filter(models.Organization.id == "org-1").first()
    db.refresh(org)
    assert (org.name, org.code) == ("MAB University", "MAB")

    renamed = client.put("/api/v1/admin/organizations/org-1", json={"name": "MAB Main", "code": "MAB"},
                         headers=people["admin"])
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "MAB Main"


def test_me_without_email_claim_value(client, people):
    claims = {"sub": "fac-1", "aud": "authenticated", "email": "", "exp": int(time.time()) + 3600}
    token = jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["email"] is None
