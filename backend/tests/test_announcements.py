"""
Marquee announcements: targeting, expiry and the joined marquee text.
Class announcements: posted by the class teacher, read by approved students.
"""
from datetime import datetime, timedelta, timezone

from educonnect.services import announcement_service

from fakes import ADMIN, STUDENT, TEACHER

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_targets_for_role():
    assert announcement_service.targets_for_role("teacher") == ["all", "teachers"]
    assert announcement_service.targets_for_role("student") == ["all", "students"]
    assert announcement_service.targets_for_role("admin") == ["all"]


def test_filter_active_drops_expired():
    announcements = [
        {"message": "forever", "expiresAt": None},
        {"message": "later", "expiresAt": NOW + timedelta(hours=1)},
        {"message": "exactly now", "expiresAt": NOW},
        {"message": "gone", "expiresAt": "2026-04-30T00:00:00Z"},
    ]

    active = announcement_service.filter_active(announcements, NOW)

    assert [a["message"] for a in active] == ["forever", "later"]


def test_marquee_text():
    assert announcement_service.marquee_text([{"message": "A"}, {"message": "B"}]) == "A ••• B"
    assert announcement_service.marquee_text([]) == ""


def test_list_active_for_role(db):
    db.put("announcements", "a1", {"message": "Holiday on Friday", "target": "all", "expiresAt": None})
    db.put("announcements", "a2", {"message": "Upload marks", "target": "teachers", "expiresAt": None})
    db.put("announcements", "a3", {"message": "Exam week", "target": "students", "expiresAt": None})
    db.put("announcements", "a4", {"message": "Old news", "target": "all", "expiresAt": NOW - timedelta(days=1)})

    active = announcement_service.list_active_announcements(db, "student", NOW)

    assert sorted(a["message"] for a in active) == ["Exam week", "Holiday on Friday"]


def test_admin_posts_and_student_reads(client, login_as):
    login_as(TEACHER["id"])
    assert client.post("/api/announcements", json={"message": "Hi"}).status_code == 403

    login_as(ADMIN["id"])
    posted = client.post("/api/announcements", json={"message": "  Results out Monday  ", "target": "students"})
    assert posted.status_code == 201
    assert posted.json()["message"] == "Results out Monday"

    login_as(TEACHER["id"])
    assert client.get("/api/announcements/active").json()["announcements"] == []

    login_as("student-1")
    body = client.get("/api/announcements/active").json()
    assert body["marqueeText"] == "Results out Monday"


def _seed_class(db, class_id, teacher_id=TEACHER["id"], enrollment_status="approved"):
    db.put("classes", class_id, {
        "teacherId": teacher_id, "title": f"Physics {class_id}", "subject": "Physics",
        "classLevel": "Class 10", "classCode": class_id.upper(), "isActive": True,
    })
    db.put("enrollments", f"enr-{class_id}", {
        "studentId": STUDENT["id"], "studentName": STUDENT["name"], "classId": class_id,
        "teacherId": teacher_id, "status": enrollment_status,
    })


def test_teacher_posts_class_announcement_students_read_it(client, db, login_as):
    _seed_class(db, "class-1")
    login_as(TEACHER["id"])

    posted = client.post("/api/announcements/classes/class-1", json={"content": "  Test moved to Friday  "})

    assert posted.status_code == 201
    body = posted.json()
    assert body["content"] == "Test moved to Friday"
    assert body["classTitle"] == "Physics class-1"
    assert body["teacherName"] == TEACHER["name"]

    login_as(STUDENT["id"])
    listed = client.get("/api/announcements/classes").json()["announcements"]
    assert [a["content"] for a in listed] == ["Test moved to Friday"]
    assert client.get("/api/announcements/active").json()["announcements"] == []


def test_class_announcement_for_another_teachers_class(client, db, login_as):
    _seed_class(db, "class-2", teacher_id="teacher-2")
    login_as(TEACHER["id"])

    resp = client.post("/api/announcements/classes/class-2", json={"content": "Hello"})

    assert resp.status_code == 404
    assert "announcements" not in db.store or db.store["announcements"] == {}


def test_students_only_see_approved_classes_newest_first(client, db):
    _seed_class(db, "class-1")
    _seed_class(db, "class-2", enrollment_status="pending")
    db.put("announcements", "c1", {"classId": "class-1", "teacherId": TEACHER["id"], "content": "older", "createdAt": NOW - timedelta(days=1)})
    db.put("announcements", "c2", {"classId": "class-1", "teacherId": TEACHER["id"], "content": "newer", "createdAt": NOW})
    db.put("announcements", "c3", {"classId": "class-2", "teacherId": TEACHER["id"], "content": "pending class", "createdAt": NOW})

    listed = client.get("/api/announcements/classes").json()["announcements"]

    assert [a["content"] for a in listed] == ["newer", "older"]


def test_list_class_announcements_splits_large_in_queries(db):
    class_ids = [f"class-{i}" for i in range(45)]
    for i, class_id in enumerate(class_ids):
        db.put("announcements", f"c{i}", {"classId": class_id, "content": str(i), "createdAt": NOW + timedelta(minutes=i)})

    listed = announcement_service.list_class_announcements(db, class_ids)

    assert len(listed) == 45
    assert listed[0]["content"] == "44"


def test_class_announcements_need_student_role(client, login_as):
    login_as(TEACHER["id"])
    assert client.get("/api/announcements/classes").status_code == 403
