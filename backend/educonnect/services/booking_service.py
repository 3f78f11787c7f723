"""Home tutor / coaching seat bookings and monthly fee records."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from educonnect.errors import NotFoundError
from educonnect.services import class_service
from educonnect.services.firestore_service import (
    add_document,
    get_document,
    stream_query,
    update_document,
)
from educonnect.services.payment_service import PLATFORM_FEE

logger = logging.getLogger(__name__)


def _newest_first(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(records, key=lambda r: r.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc), reverse=True)


def create_booking(db, student_id: str, details: Dict[str, Any]) -> Dict[str, Any]:
    """Store a new booking request. Home tutor bookings need an address.

    Raises:
        ValueError: home tutor booking without ``studentAddress``
    """
    if details.get("bookingType") == "homeTutor" and not (details.get("studentAddress") or "").strip():
        raise ValueError("Please enter the address for the home tutor")

    booking = {
        **details,
        "studentId": student_id,
        "status": "Pending",
        "paymentStatus": "unpaid",
        "platformFee": PLATFORM_FEE,
        "paidAt": None,
        "createdAt": datetime.now(timezone.utc),
    }
    created = add_document(db, "homeBookings", booking)
    logger.info("Booking %s (%s) created for %s", created["id"], booking.get("bookingType"), student_id)
    return created


def list_student_bookings(db, student_id: str) -> List[Dict[str, Any]]:
    query = db.collection("homeBookings").where("studentId", "==", student_id)
    return _newest_first(stream_query(query, "homeBookings"))


def list_all_bookings(db, status: Optional[str] = None) -> List[Dict[str, Any]]:
    query = db.collection("homeBookings")
    if status:
        query = query.where("status", "==", status)
    return _newest_first(stream_query(query, "homeBookings"))


def get_booking(db, booking_id: str) -> Dict[str, Any]:
    return get_document(db, "homeBookings", booking_id, label="Booking")


def get_student_booking(db, booking_id: str, student_id: str) -> Dict[str, Any]:
    """Fetch a booking made by ``student_id``; other students' bookings are reported missing."""
    booking = get_booking(db, booking_id)
    if booking.get("studentId") != student_id:
        raise NotFoundError("Booking not found")
    return booking


def set_booking_status(db, booking_id: str, status: str) -> Dict[str, Any]:
    booking = get_booking(db, booking_id)
    update_document(db, "homeBookings", booking_id, {"status": status})
    booking["status"] = status
    return booking


def mark_booking_paid(db, booking_id: str) -> None:
    update_document(db, "homeBookings", booking_id, {
        "paymentStatus": "paid",
        "paidAt": datetime.now(timezone.utc),
    })


def find_fee(db, student_id: str, class_id: str, fee_month: str, fee_year: int) -> Optional[Dict[str, Any]]:
    query = db.collection("fees") \
        .where("studentId", "==", student_id) \
        .where("classId", "==", class_id) \
        .where("feeMonth", "==", fee_month) \
        .where("feeYear", "==", fee_year) \
        .limit(1)
    results = stream_query(query, "fees")
    return results[0] if results else None


def set_fee_status(
    db,
    teacher_id: str,
    student_id: str,
    class_id: str,
    fee_month: str,
    fee_year: int,
    status: str,
) -> Dict[str, Any]:
    """Create or update the fee record of a student for one month.

    Raises:
        NotFoundError: the class is not the teacher's or the student is not enrolled
    """
    class_service.get_owned_class(db, class_id, teacher_id)
    enrollment = class_service.require_approved_student(db, class_id, student_id)
    paid_on = datetime.now(timezone.utc) if status == "paid" else None

    existing = find_fee(db, student_id, class_id, fee_month, fee_year)
    if existing:
        update_document(db, "fees", existing["id"], {"status": status, "paidOn": paid_on})
        existing.update({"status": status, "paidOn": paid_on})
        return existing

    return add_document(db, "fees", {
        "studentId": student_id,
        "studentName": enrollment.get("studentName"),
        "teacherId": teacher_id,
        "classId": class_id,
        "feeMonth": fee_month,
        "feeYear": fee_year,
        "status": status,
        "paidOn": paid_on,
    })


def list_class_fees(db, class_id: str, fee_month: Optional[str] = None, fee_year: Optional[int] = None) -> List[Dict[str, Any]]:
    query = db.collection("fees").where("classId", "==", class_id)
    if fee_month:
        query = query.where("feeMonth", "==", fee_month)
    if fee_year:
        query = query.where("feeYear", "==", fee_year)
    return stream_query(query, "fees")


def list_student_fees(db, student_id: str) -> List[Dict[str, Any]]:
    query = db.collection("fees").where("studentId", "==", student_id)
    return stream_query(query, "fees")


def get_student_fee(db, fee_id: str, student_id: str) -> Dict[str, Any]:
    fee = get_document(db, "fees", fee_id, label="Fee record")
    if fee.get("studentId") != student_id:
        raise NotFoundError("Fee record not found")
    return fee


def mark_fee_paid(db, fee_id: str) -> None:
    update_document(db, "fees", fee_id, {
        "status": "paid",
        "paidOn": datetime.now(timezone.utc),
    })
