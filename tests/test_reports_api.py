from datetime import date

from clockwise.db import models


def _log(client, headers, day, start, end, activity="class", submit=True):
    payload = {"entry_date": day, "start_time": start, "end_time": end, "activity_type": activity, "submit": submit}
    return client.post("/api/v1/timesheets", json=payload, headers=headers)


def test_reports_are_for_admins_and_program_managers(client, people):
    params = {"date_from": "2024-06-10", "date_to": "2024-06-14"}
    assert client.get("/api/v1/reports/member/fac-1", params=params, headers=people["hod"]).status_code == 403
    assert client.get("/api/v1/reports/member/fac-1", params=params, headers=people["pm"]).status_code == 200


def test_member_report(client, people):
    _log(client, people["member"], "2024-06-10", "09:00", "13:00")
    _log(client, people["member"], "2024-06-11", "09:00", "11:00", activity="quiz")
    _log(client, people["member"], "2024-06-12", "09:00", "11:00", submit=False)

    report = client.get(
        "/api/v1/reports/member/fac-1",
        params={"period": "daily", "date_from": "2024-06-10", "date_to": "2024-06-14"},
        headers=people["admin"],
    ).json()

    assert report["completion"]["actual_hours"] == 6
    assert report["completion"]["expected_hours"] == 40
    assert report["completion"]["status"] == "Critical"
    assert report["summary"]["total_hours"] == 8
    assert [a["activity_type"] for a in report["activity_breakdown"]] == ["class", "quiz"]
    assert len(report["series"]) == 3


def test_member_report_for_unknown_member_is_404(client, people):
    response = client.get("/api/v1/reports/member/ghost", headers=people["admin"])
    assert response.status_code == 404


def test_inverted_dates_are_rejected(client, people):
    response = client.get("/api/v1/reports/member/fac-1", params={"date_from": "2024-06-14", "date_to": "2024-06-10"},
                          headers=people["admin"])
    assert response.status_code == 400


def test_department_report_and_all_departments(client, people):
    _log(client, people["member"], "2024-06-10", "09:00", "17:00")
    _log(client, people["other_member"], "2024-06-10", "09:00", "13:00")
    params = {"period": "weekly", "date_from": "2024-06-10", "date_to": "2024-06-10"}

    cs = client.get("/api/v1/reports/department/dept-cs", params=params, headers=people["admin"]).json()
    everyone = client.get("/api/v1/reports/department/all", params=params, headers=people["admin"]).json()

    assert [m["user_id"] for m in cs["member_breakdown"]] == ["fac-1"]
    assert cs["completion"]["status"] == "Exceeded Target"
    assert sorted(m["user_id"] for m in everyone["member_breakdown"]) == ["fac-1", "fac-2"]
    assert everyone["completion"]["actual_hours"] == 12
    assert everyone["completion"]["expected_hours"] == 16
    assert {d["department_id"]: d["total_hours"] for d in everyone["department_totals"]} == {"dept-cs": 8, "dept-ee": 4}


def test_corrupt_entry_surfaces_as_server_error(client, db, people):
    db.add(models.TimesheetEntry(
        user_id="fac-1", department_id="dept-cs", entry_date=date(2024, 6, 10), start_time="12:00",
        end_time="11:00", duration_minutes=1, activity_type="class", status="approved",
    ))
    db.commit()

    response = client.get("/api/v1/reports/member/fac-1", params={"date_from": "2024-06-10", "date_to": "2024-06-10"},
                          headers=people["admin"])
    assert response.status_code == 500
