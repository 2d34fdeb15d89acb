# tests/test_attendance.py
from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from school_mgmt.models import Attendance
from school_mgmt.services.attendance_service import AttendanceService

pytestmark = pytest.mark.anyio


def mark_body(student, classroom, **overrides):
    body = {
        "student_id": student.id,
        "classroom_id": classroom.id,
        "date": "2026-03-02",
        "status": "present",
    }
    body.update(overrides)
    return body


async def test_marking_twice_updates_single_record(client, tenant, seed, session_factory):
    student = await seed.student(tenant["school"].id, classroom_id=tenant["classroom"].id)
    headers = seed.headers(tenant["teacher"])

    first = await client.post("/api/attendance/markAttendance", headers=headers,
                              json=mark_body(student, tenant["classroom"], date="2026-03-02T08:15:00Z"))
    second = await client.post("/api/attendance/markAttendance", headers=seed.headers(tenant["admin"]),
                               json=mark_body(student, tenant["classroom"], status="late", remarks="bus"))
    assert first.status_code == 200
    assert second.status_code == 200

    record = second.json()["data"]["attendance"]
    assert record["id"] == first.json()["data"]["attendance"]["id"]
    assert record["date"] == "2026-03-02"
    assert record["status"] == "late"
    assert record["remarks"] == "bus"
    assert record["taken_by"] == tenant["admin"].id
    assert record["recorded_by"]["id"] == tenant["admin"].id
    assert record["student"] == {"id": student.id, "name": student.name, "student_id": student.student_id}
    assert record["classroom"]["name"] == tenant["classroom"].name

    async with session_factory() as session:
        assert (await session.execute(select(func.count(Attendance.id)))).scalar_one() == 1


async def test_mark_attendance_rules(client, tenant, seed):
    headers = seed.headers(tenant["teacher"])
    other = await seed.school()
    foreign_student = await seed.student(other.id)
    foreign_room = await seed.classroom(other.id)
    student = await seed.student(tenant["school"].id)

    missing = await client.post("/api/attendance/markAttendance", headers=headers, json={
        "student_id": 999, "classroom_id": tenant["classroom"].id, "date": "2026-03-02", "status": "present"
    })
    assert missing.status_code == 404

    foreign = await client.post("/api/attendance/markAttendance", headers=headers,
                                json=mark_body(foreign_student, tenant["classroom"]))
    assert foreign.status_code == 403

    wrong_room = await client.post("/api/attendance/markAttendance", headers=headers,
                                   json=mark_body(student, foreign_room))
    assert wrong_room.status_code == 400

    bad_status = await client.post("/api/attendance/markAttendance", headers=headers,
                                   json=mark_body(student, tenant["classroom"], status="sick"))
    assert bad_status.status_code == 400


async def test_staff_cannot_mark_attendance(client, tenant, seed):
    staff = await seed.user("staff", school_id=tenant["school"].id)
    student = await seed.student(tenant["school"].id)

    r = await client.post("/api/attendance/markAttendance", headers=seed.headers(staff),
                          json=mark_body(student, tenant["classroom"]))
    assert r.status_code == 403


async def test_attendance_report_defaults_to_last_30_days(client, tenant, seed):
    headers = seed.headers(tenant["teacher"])
    student = await seed.student(tenant["school"].id)
    today = date.today()
    for offset in (0, 5, 45):
        day = (today - timedelta(days=offset)).isoformat()
        await client.post("/api/attendance/markAttendance", headers=headers,
                          json=mark_body(student, tenant["classroom"], date=day))

    report = (await client.get("/api/attendance/getAttendanceReport",
                               headers=seed.headers(tenant["admin"]))).json()["data"]
    assert report["meta"]["total"] == 2
    assert [row["date"] for row in report["report"]] == [
        today.isoformat(), (today - timedelta(days=5)).isoformat()
    ]

    ranged = await client.get(
        f"/api/attendance/getAttendanceReport?start_date={(today - timedelta(days=60)).isoformat()}"
        f"&end_date={today.isoformat()}&student_id={student.id}",
        headers=seed.headers(tenant["admin"])
    )
    assert ranged.json()["data"]["meta"]["total"] == 3

    teacher_view = await client.get("/api/attendance/getAttendanceReport", headers=headers)
    assert teacher_view.status_code == 403


async def test_get_student_attendance(client, tenant, seed):
    headers = seed.headers(tenant["teacher"])
    student = await seed.student(tenant["school"].id)
    other = await seed.school()
    foreign_student = await seed.student(other.id)
    for day in ("2026-03-02", "2026-03-03", "2026-03-04"):
        await client.post("/api/attendance/markAttendance", headers=headers,
                          json=mark_body(student, tenant["classroom"], date=day))

    page = (await client.get(f"/api/attendance/getStudentAttendance?student_id={student.id}&limit=2",
                             headers=headers)).json()["data"]
    assert [row["date"] for row in page["attendance"]] == ["2026-03-04", "2026-03-03"]
    assert page["meta"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}

    foreign = await client.get(f"/api/attendance/getStudentAttendance?student_id={foreign_student.id}",
                               headers=headers)
    assert foreign.status_code == 403


async def test_concurrent_insert_is_retried_as_update(client, tenant, seed, session_factory, monkeypatch):
    student = await seed.student(tenant["school"].id, classroom_id=tenant["classroom"].id)

    # Another request has already stored the row this one is about to insert
    async with session_factory() as session:
        session.add(Attendance(
            student_id=student.id,
            classroom_id=tenant["classroom"].id,
            school_id=tenant["school"].id,
            date=date(2026, 3, 2),
            status="absent",
            taken_by=tenant["admin"].id
        ))
        await session.commit()

    original = AttendanceService._find_record
    lookups = []

    async def stale_first_lookup(self, student_id, classroom_id, day):
        lookups.append(day)
        if len(lookups) == 1:
            return None
        return await original(self, student_id, classroom_id, day)

    monkeypatch.setattr(AttendanceService, "_find_record", stale_first_lookup)

    r = await client.post("/api/attendance/markAttendance", headers=seed.headers(tenant["teacher"]),
                          json=mark_body(student, tenant["classroom"], status="present"))
    assert r.status_code == 200
    assert len(lookups) == 2

    async with session_factory() as session:
        rows = (await session.execute(select(Attendance))).scalars().all()
    assert len(rows) == 1
    assert rows[0].status == "present"
    assert rows[0].taken_by == tenant["teacher"].id
