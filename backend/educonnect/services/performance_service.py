"""Test results and attendance recorded by teachers, and the inputs the
performance analyzer builds from them."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from educonnect.models.ai import (
    AttendanceSummary,
    PerformanceAnalyzerInput,
    TestResultSummary,
)
from educonnect.services import class_service
from educonnect.services.firestore_service import add_document, stream_query

logger = logging.getLogger(__name__)


def record_result(
    db,
    teacher_id: str,
    class_id: str,
    student_id: str,
    test_name: str,
    subject: str,
    marks: float,
    max_marks: float,
    date: str,
) -> Dict[str, Any]:
    """Store one test result for an approved student of the teacher's class.

    Raises:
        ValueError: marks are outside ``0..max_marks``
        NotFoundError: the class is not the teacher's or the student is not enrolled
    """
    if max_marks <= 0 or marks < 0 or marks > max_marks:
        raise ValueError("Marks must be between 0 and the maximum marks")

    class_service.get_owned_class(db, class_id, teacher_id)
    enrollment = class_service.require_approved_student(db, class_id, student_id)

    return add_document(db, "performances", {
        "teacherId": teacher_id,
        "classId": class_id,
        "studentId": student_id,
        "studentName": enrollment.get("studentName"),
        "testName": test_name.strip(),
        "subject": subject.strip(),
        "marks": marks,
        "maxMarks": max_marks,
        "date": date,
        "createdAt": datetime.now(timezone.utc),
    })


def list_class_results(db, class_id: str) -> List[Dict[str, Any]]:
    query = db.collection("performances").where("classId", "==", class_id)
    results = stream_query(query, "performances")
    return sorted(results, key=lambda r: r.get("date") or "", reverse=True)


def list_student_results(db, class_id: str, student_id: str) -> List[Dict[str, Any]]:
    query = db.collection("performances") \
        .where("classId", "==", class_id) \
        .where("studentId", "==", student_id)
    return stream_query(query, "performances")


def record_attendance(
    db,
    teacher_id: str,
    class_id: str,
    date: str,
    statuses: Dict[str, str],
) -> List[Dict[str, Any]]:
    """Mark Present/Absent for several students of a class on ``date``.

    Students without an approved enrollment are skipped.
    """
    class_service.get_owned_class(db, class_id, teacher_id)
    enrolled = {e["studentId"] for e in class_service.list_class_students(db, class_id)}

    records = []
    for student_id, status in statuses.items():
        if student_id not in enrolled:
            logger.warning("Skipping attendance for %s: not enrolled in %s", student_id, class_id)
            continue
        records.append(add_document(db, "attendance", {
            "classId": class_id,
            "studentId": student_id,
            "teacherId": teacher_id,
            "date": date,
            "status": status,
        }))
    return records


def list_student_attendance(db, class_id: str, student_id: str) -> List[Dict[str, Any]]:
    query = db.collection("attendance") \
        .where("classId", "==", class_id) \
        .where("studentId", "==", student_id)
    return stream_query(query, "attendance")


def summarize_attendance(records: List[Dict[str, Any]]) -> AttendanceSummary:
    present = sum(1 for r in records if r.get("status") == "Present")
    return AttendanceSummary(present=present, total=len(records))


def build_performance_input(db, teacher_id: str, class_id: str, student_id: str) -> PerformanceAnalyzerInput:
    """Collect a student's attendance and test results for the analyzer."""
    class_data = class_service.get_owned_class(db, class_id, teacher_id)
    enrollment = class_service.require_approved_student(db, class_id, student_id)

    attendance = list_student_attendance(db, class_id, student_id)
    results = list_student_results(db, class_id, student_id)

    return PerformanceAnalyzerInput(
        studentName=enrollment.get("studentName") or "Student",
        className=class_data.get("title") or class_data.get("subject") or "Class",
        attendance=summarize_attendance(attendance),
        testResults=[
            TestResultSummary(
                testTitle=r.get("testName", "Test"),
                marksObtained=r.get("marks", 0),
                totalMarks=r.get("maxMarks", 0),
            )
            for r in results
        ],
    )


def list_my_results(db, student_id: str) -> List[Dict[str, Any]]:
    """Every result recorded for a student across classes, latest date first."""
    query = db.collection("performances").where("studentId", "==", student_id)
    results = stream_query(query, "performances")
    return sorted(results, key=lambda r: r.get("date") or "", reverse=True)


def summarize_my_attendance(db, student_id: str) -> List[Dict[str, Any]]:
    """Attendance of a student grouped per class, each group latest date first.

    Class titles come from the student's enrollments; classes the student
    has since left keep their records with an empty title.
    """
    query = db.collection("attendance").where("studentId", "==", student_id)
    records = stream_query(query, "attendance")
    titles = {
        e["classId"]: e.get("classTitle") or ""
        for e in class_service.list_student_enrollments(db, student_id)
    }

    by_class: Dict[str, List[Dict[str, Any]]] = {}
    for record in records:
        by_class.setdefault(record["classId"], []).append(record)

    summaries = []
    for class_id, class_records in by_class.items():
        class_records.sort(key=lambda r: r.get("date") or "", reverse=True)
        summary = summarize_attendance(class_records)
        summaries.append({
            "classId": class_id,
            "classTitle": titles.get(class_id, ""),
            "present": summary.present,
            "absent": summary.total - summary.present,
            "total": summary.total,
            "records": class_records,
        })
    summaries.sort(key=lambda s: s["classTitle"])
    return summaries
