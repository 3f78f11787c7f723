"""Classes and the enrollments that connect students to them."""
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from educonnect.errors import NotFoundError
from educonnect.services.firestore_service import (
    add_document,
    get_document,
    guarded,
    snapshot_to_dict,
    stream_query,
    update_document,
)

logger = logging.getLogger(__name__)

CLASS_CODE_LENGTH = 6


def generate_class_code() -> str:
    return str(uuid.uuid4())[:CLASS_CODE_LENGTH].upper()


def create_class(
    db,
    teacher_id: str,
    teacher_name: str,
    subject: str,
    class_level: str,
    title: Optional[str] = None,
    batch_time: Optional[str] = None,
) -> Dict[str, Any]:
    if not teacher_id:
        raise ValueError("User not logged in")

    class_data = {
        "teacherId": teacher_id,
        "teacherName": teacher_name,
        "title": title or f"{subject} - {class_level}",
        "subject": subject,
        "classLevel": class_level,
        "classCode": generate_class_code(),
        "batchTime": batch_time,
        "isActive": True,
        "createdAt": datetime.now(timezone.utc),
    }
    created = add_document(db, "classes", class_data)
    logger.info("Teacher %s created class %s (%s)", teacher_id, created["id"], class_data["classCode"])
    return created


def list_teacher_classes(db, teacher_id: str) -> List[Dict[str, Any]]:
    query = db.collection("classes").where("teacherId", "==", teacher_id)
    classes = stream_query(query, "classes")
    return sorted(classes, key=lambda c: c.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc), reverse=True)


def get_class(db, class_id: str) -> Dict[str, Any]:
    return get_document(db, "classes", class_id, label="Class")


def get_owned_class(db, class_id: str, teacher_id: str) -> Dict[str, Any]:
    """Fetch a class and check that ``teacher_id`` runs it.

    Classes of other teachers are reported as missing.
    """
    class_data = get_class(db, class_id)
    if class_data.get("teacherId") != teacher_id:
        raise NotFoundError("Class not found")
    return class_data


def find_class_by_code(db, class_code: str) -> Optional[Dict[str, Any]]:
    query = db.collection("classes") \
        .where("classCode", "==", class_code.strip().upper()) \
        .limit(1)
    with guarded("list", "classes"):
        docs = list(query.stream())
    if not docs:
        return None
    return snapshot_to_dict(docs[0])


def create_enrollment(db, class_data: Dict[str, Any], student: Dict[str, Any], status: str = "pending") -> Dict[str, Any]:
    enrollment = {
        "studentId": student["id"],
        "studentName": (student.get("name") or "").strip(),
        "mobileNumber": (student.get("mobileNumber") or "").strip(),
        "classId": class_data["id"],
        "teacherId": class_data.get("teacherId"),
        "classTitle": class_data.get("title"),
        "classSubject": class_data.get("subject"),
        "teacherName": class_data.get("teacherName"),
        "batchTime": class_data.get("batchTime"),
        "status": status,
        "createdAt": datetime.now(timezone.utc),
    }
    return add_document(db, "enrollments", enrollment)


def find_enrollment(db, class_id: str, student_id: str) -> Optional[Dict[str, Any]]:
    query = db.collection("enrollments") \
        .where("classId", "==", class_id) \
        .where("studentId", "==", student_id) \
        .limit(1)
    results = stream_query(query, "enrollments")
    return results[0] if results else None


def join_class(db, class_code: str, student: Dict[str, Any]) -> Dict[str, Any]:
    """Request to join the class with ``class_code``.

    Joining twice returns the enrollment created the first time.

    Raises:
        NotFoundError: no class has this code or the class is closed
    """
    class_data = find_class_by_code(db, class_code)
    if not class_data or not class_data.get("isActive", True):
        raise NotFoundError("The class code is incorrect. Please try again.")

    existing = find_enrollment(db, class_data["id"], student["id"])
    if existing:
        return existing
    return create_enrollment(db, class_data, student, status="pending")


def list_student_enrollments(db, student_id: str) -> List[Dict[str, Any]]:
    query = db.collection("enrollments").where("studentId", "==", student_id)
    return stream_query(query, "enrollments")


def list_teacher_enrollments(db, teacher_id: str, status: Optional[str] = None) -> List[Dict[str, Any]]:
    query = db.collection("enrollments").where("teacherId", "==", teacher_id)
    if status:
        query = query.where("status", "==", status)
    return stream_query(query, "enrollments")


def list_class_students(db, class_id: str) -> List[Dict[str, Any]]:
    query = db.collection("enrollments") \
        .where("classId", "==", class_id) \
        .where("status", "==", "approved")
    return stream_query(query, "enrollments")


def set_enrollment_status(db, enrollment_id: str, teacher_id: str, status: str) -> Dict[str, Any]:
    enrollment = get_document(db, "enrollments", enrollment_id, label="Enrollment")
    if enrollment.get("teacherId") != teacher_id:
        raise NotFoundError("Enrollment not found")
    update_document(db, "enrollments", enrollment_id, {
        "status": status,
        "updatedAt": datetime.now(timezone.utc),
    })
    enrollment["status"] = status
    return enrollment


def require_approved_student(db, class_id: str, student_id: str) -> Dict[str, Any]:
    enrollment = find_enrollment(db, class_id, student_id)
    if not enrollment or enrollment.get("status") != "approved":
        raise NotFoundError("Student is not enrolled in this class")
    return enrollment
