"""
Bookings, fees and their simulated payments through the API.
"""
from fakes import ADMIN, STUDENT, TEACHER

from educonnect.services.payment_service import PAYMENT_FAILED_MESSAGE, PLATFORM_FEE

BOOKING = {
    "studentName": "Asha Verma",
    "fatherName": "Mohan Verma",
    "mobileNumber": "9822222222",
    "studentClass": "Class 10",
    "subject": "Maths",
    "studentAddress": "12 MG Road, Pune",
    "bookingType": "homeTutor",
    "tuitionType": "single_student",
}


def _seed_class_with_student(db):
    db.put("classes", "class-1", {
        "teacherId": TEACHER["id"], "teacherName": TEACHER["name"], "title": "Physics - Class 10",
        "subject": "Physics", "classLevel": "Class 10", "classCode": "ABC123", "isActive": True,
    })
    db.put("enrollments", "enr-1", {
        "studentId": STUDENT["id"], "studentName": STUDENT["name"], "classId": "class-1",
        "teacherId": TEACHER["id"], "status": "approved",
    })


def test_create_booking_defaults(client, db):
    resp = client.post("/api/bookings", json=BOOKING)

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "Pending"
    assert body["paymentStatus"] == "unpaid"
    assert body["platformFee"] == PLATFORM_FEE
    assert db.docs("homeBookings")[0]["studentId"] == STUDENT["id"]


def test_home_tutor_booking_needs_address(client):
    resp = client.post("/api/bookings", json={**BOOKING, "studentAddress": "  "})
    assert resp.status_code == 400


def test_coaching_seat_without_address_is_fine(client):
    resp = client.post("/api/bookings", json={**BOOKING, "bookingType": "coachingSeat", "studentAddress": None})
    assert resp.status_code == 201


def test_teacher_cannot_book(client, login_as):
    login_as(TEACHER["id"])
    assert client.post("/api/bookings", json=BOOKING).status_code == 403


def test_pay_booking_marks_paid(client, db):
    booking_id = client.post("/api/bookings", json=BOOKING).json()["id"]

    resp = client.post(f"/api/bookings/{booking_id}/pay")

    assert resp.status_code == 200
    assert resp.json() == {"state": "success", "error": None}
    stored = db.store["homeBookings"][booking_id]
    assert stored["paymentStatus"] == "paid"
    assert stored["paidAt"] is not None

    state = client.get(f"/api/bookings/{booking_id}/payment")
    assert state.json()["state"] == "success"


def test_pay_booking_twice_is_rejected(client):
    booking_id = client.post("/api/bookings", json=BOOKING).json()["id"]
    client.post(f"/api/bookings/{booking_id}/pay")

    assert client.post(f"/api/bookings/{booking_id}/pay").status_code == 400


def test_pay_while_not_idle_is_conflict(client, db):
    booking_id = client.post("/api/bookings", json=BOOKING).json()["id"]
    client.app.state.payment_simulators.get("homeBookings", booking_id).state = "processing"

    resp = client.post(f"/api/bookings/{booking_id}/pay")

    assert resp.status_code == 409
    assert db.store["homeBookings"][booking_id]["paymentStatus"] == "unpaid"


def test_failed_payment_write_reports_error(client, db):
    booking_id = client.post("/api/bookings", json=BOOKING).json()["id"]
    db.deny("update", "homeBookings")

    resp = client.post(f"/api/bookings/{booking_id}/pay")

    assert resp.status_code == 500
    assert resp.json()["detail"] == PAYMENT_FAILED_MESSAGE
    state = client.get(f"/api/bookings/{booking_id}/payment").json()
    assert state == {"state": "idle", "error": PAYMENT_FAILED_MESSAGE}


def test_other_students_booking_is_not_found(client, db):
    db.put("homeBookings", "b-other", {**BOOKING, "studentId": "someone-else", "paymentStatus": "unpaid"})
    assert client.post("/api/bookings/b-other/pay").status_code == 404


def test_admin_lists_and_confirms_bookings(client, login_as):
    booking_id = client.post("/api/bookings", json=BOOKING).json()["id"]
    login_as(ADMIN["id"])

    listed = client.get("/api/bookings/all", params={"status": "Pending"})
    assert [b["id"] for b in listed.json()["bookings"]] == [booking_id]

    updated = client.patch(f"/api/bookings/{booking_id}", json={"status": "Confirmed"})
    assert updated.json()["status"] == "Confirmed"


def test_teacher_sets_fee_and_student_pays(client, db, login_as):
    _seed_class_with_student(db)
    login_as(TEACHER["id"])

    fee = client.put("/api/fees", json={
        "studentId": STUDENT["id"], "classId": "class-1",
        "feeMonth": "March", "feeYear": 2026, "status": "unpaid",
    })
    assert fee.status_code == 200
    fee_id = fee.json()["id"]

    again = client.put("/api/fees", json={
        "studentId": STUDENT["id"], "classId": "class-1",
        "feeMonth": "March", "feeYear": 2026, "status": "unpaid",
    })
    assert again.json()["id"] == fee_id
    assert len(db.docs("fees")) == 1

    login_as(STUDENT["id"])
    assert [f["id"] for f in client.get("/api/fees").json()["fees"]] == [fee_id]

    paid = client.post(f"/api/fees/{fee_id}/pay")
    assert paid.status_code == 200
    assert db.store["fees"][fee_id]["status"] == "paid"
    assert db.store["fees"][fee_id]["paidOn"] is not None


def test_fee_for_student_outside_class_is_not_found(client, db, login_as):
    _seed_class_with_student(db)
    login_as(TEACHER["id"])

    resp = client.put("/api/fees", json={
        "studentId": "stranger", "classId": "class-1",
        "feeMonth": "March", "feeYear": 2026, "status": "paid",
    })
    assert resp.status_code == 404
