from typing import Dict, List, Literal, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from educonnect.auth.dependencies import require_role
from educonnect.models.ai import PerformanceAnalyzerOutput
from educonnect.models.user import BaseProfile
from educonnect.services import ai_service, class_service, performance_service
from educonnect.services.firestore_service import get_db, get_document
from educonnect.services.messaging_service import (
    DEFAULT_COUNTRY_CODE,
    build_whatsapp_link,
    complaint_message,
    whatsapp_number,
)

router = APIRouter(
    prefix="/classes/{class_id}",
    tags=["performance"],
)

AttendanceStatus = Literal["Present", "Absent"]


class PerformanceRecord(BaseModel):
    """Response model for a recorded test result."""
    id: str
    classId: str
    studentId: str
    studentName: Optional[str] = None
    testName: str
    subject: str
    marks: float
    maxMarks: float
    date: str = Field(..., description="Date in YYYY-MM-DD format")


class RecordResultRequest(BaseModel):
    studentId: str = Field(..., min_length=1)
    testName: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1)
    marks: float = Field(..., ge=0)
    maxMarks: float = Field(..., gt=0)
    date: str = Field(..., description="Date in YYYY-MM-DD format")


class PerformanceListResponse(BaseModel):
    results: List[PerformanceRecord]


class AttendanceRecord(BaseModel):
    id: str
    classId: str
    studentId: str
    date: str
    status: AttendanceStatus


class RecordAttendanceRequest(BaseModel):
    """Attendance for one day, keyed by student id."""
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    statuses: Dict[str, AttendanceStatus] = Field(..., min_length=1)


class AttendanceListResponse(BaseModel):
    records: List[AttendanceRecord]


class ComplaintRequest(BaseModel):
    complaint: str = Field(..., min_length=1, max_length=1000)


class ComplaintLinkResponse(BaseModel):
    whatsappUrl: str
    phoneNumber: str


def _validate_date(date: str) -> None:
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Must be YYYY-MM-DD"
        )


@router.post(
    "/results",
    response_model=PerformanceRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Record test result",
    description="Stores a student's marks for a test in one of the teacher's classes.",
    responses={
        400: {"description": "Invalid date or marks"},
        404: {"description": "Class not found or student not enrolled"},
    },
)
def record_result(
    class_id: str,
    request: RecordResultRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> PerformanceRecord:
    _validate_date(request.date)
    try:
        created = performance_service.record_result(
            db,
            teacher_id=teacher.id,
            class_id=class_id,
            student_id=request.studentId,
            test_name=request.testName,
            subject=request.subject,
            marks=request.marks,
            max_marks=request.maxMarks,
            date=request.date,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    print(f"[PERFORMANCE] Result {created['id']} recorded for {request.studentId} in {class_id}")
    return PerformanceRecord(**created)


@router.get(
    "/results",
    response_model=PerformanceListResponse,
    summary="List test results",
    description="Returns every test result recorded for the class, latest date first.",
)
def list_results(
    class_id: str,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> PerformanceListResponse:
    class_service.get_owned_class(db, class_id, teacher.id)
    results = performance_service.list_class_results(db, class_id)
    return PerformanceListResponse(results=[PerformanceRecord(**r) for r in results])


@router.post(
    "/attendance",
    response_model=AttendanceListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance",
    description="Marks students of the class Present or Absent for a day. Students not enrolled are skipped.",
)
def record_attendance(
    class_id: str,
    request: RecordAttendanceRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> AttendanceListResponse:
    _validate_date(request.date)
    records = performance_service.record_attendance(db, teacher.id, class_id, request.date, request.statuses)
    print(f"[PERFORMANCE] Attendance for {class_id} on {request.date}: {len(records)} record(s)")
    return AttendanceListResponse(records=[AttendanceRecord(**r) for r in records])


@router.get(
    "/students/{student_id}/analysis",
    response_model=PerformanceAnalyzerOutput,
    summary="Analyze student performance",
    description="Builds the student's attendance and test summary and asks the AI for a performance report.",
    responses={
        404: {"description": "Class not found or student not enrolled"},
        502: {"description": "The AI returned an empty or invalid response"},
    },
)
def analyze_student(
    class_id: str,
    student_id: str,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> PerformanceAnalyzerOutput:
    analyzer_input = performance_service.build_performance_input(db, teacher.id, class_id, student_id)
    print(f"[PERFORMANCE] Analyzing {student_id} in {class_id} ({len(analyzer_input.testResults)} tests)")
    return ai_service.analyze_student_performance(analyzer_input)


@router.post(
    "/students/{student_id}/complaint",
    response_model=ComplaintLinkResponse,
    summary="Prepare parent complaint",
    description="Returns a WhatsApp link with the complaint addressed to the parent's number, "
                "or the student's own number when no parent number is saved.",
    responses={
        400: {"description": "No phone number on file"},
    },
)
def prepare_complaint(
    class_id: str,
    student_id: str,
    request: ComplaintRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> ComplaintLinkResponse:
    class_service.get_owned_class(db, class_id, teacher.id)
    enrollment = class_service.require_approved_student(db, class_id, student_id)
    student = get_document(db, "users", student_id, label="Student")

    phone_number = student.get("parentMobileNumber") or student.get("mobileNumber") or enrollment.get("mobileNumber")
    student_name = student.get("name") or enrollment.get("studentName") or "your child"
    message = complaint_message(teacher.name, student_name, request.complaint)
    try:
        number = whatsapp_number(phone_number, country_code=DEFAULT_COUNTRY_CODE)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No phone number is saved for this student"
        )
    print(f"[PERFORMANCE] Complaint link prepared for {student_id} by {teacher.id}")
    return ComplaintLinkResponse(
        whatsappUrl=build_whatsapp_link(number, message),
        phoneNumber=number,
    )
