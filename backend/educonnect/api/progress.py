from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from educonnect.api.performance import AttendanceRecord, PerformanceListResponse, PerformanceRecord
from educonnect.auth.dependencies import require_role
from educonnect.models.user import BaseProfile
from educonnect.services import performance_service
from educonnect.services.firestore_service import get_db

router = APIRouter(
    prefix="/progress",
    tags=["performance"],
)


class ClassAttendance(BaseModel):
    """A student's attendance in one class."""
    classId: str
    classTitle: str = ""
    present: int
    absent: int
    total: int
    records: List[AttendanceRecord]


class MyAttendanceResponse(BaseModel):
    classes: List[ClassAttendance]


@router.get(
    "/results",
    response_model=PerformanceListResponse,
    summary="Get my test results",
    description="Student-only. Returns the caller's test results from every class, latest date first.",
)
def get_my_results(
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> PerformanceListResponse:
    results = performance_service.list_my_results(db, student.id)
    return PerformanceListResponse(results=[PerformanceRecord(**r) for r in results])


@router.get(
    "/attendance",
    response_model=MyAttendanceResponse,
    summary="Get my attendance",
    description="Student-only. Returns present/absent counts and the daily records of the caller, per class.",
)
def get_my_attendance(
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> MyAttendanceResponse:
    summaries = performance_service.summarize_my_attendance(db, student.id)
    return MyAttendanceResponse(classes=[ClassAttendance(**s) for s in summaries])
