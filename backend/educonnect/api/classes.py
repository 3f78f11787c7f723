from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from educonnect.auth.dependencies import require_role
from educonnect.models.classes import (
    ClassListResponse,
    ClassRecord,
    CreateClassRequest,
    Enrollment,
    EnrollmentListResponse,
    EnrollmentStatus,
    JoinClassRequest,
    UpdateEnrollmentRequest,
)
from educonnect.models.user import BaseProfile
from educonnect.services import class_service
from educonnect.services.firestore_service import get_db

router = APIRouter(
    tags=["classes"],
)


@router.post(
    "/classes",
    response_model=ClassRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
    description="Creates a class for the current teacher with a fresh 6-character join code.",
)
def create_class(
    request: CreateClassRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> ClassRecord:
    created = class_service.create_class(
        db,
        teacher_id=teacher.id,
        teacher_name=teacher.name,
        subject=request.subject.strip(),
        class_level=request.classLevel.strip(),
        title=request.title,
        batch_time=request.batchTime,
    )
    print(f"[CLASSES] Created class {created['id']} for teacher {teacher.id}")
    return ClassRecord(**created)


@router.get(
    "/classes",
    response_model=ClassListResponse,
    summary="List my classes",
    description="Returns the current teacher's classes, newest first.",
)
def list_classes(
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> ClassListResponse:
    classes = class_service.list_teacher_classes(db, teacher.id)
    return ClassListResponse(classes=[ClassRecord(**c) for c in classes])


@router.post(
    "/classes/join",
    response_model=Enrollment,
    summary="Join class by code",
    description="Creates a pending enrollment for the current student. Joining twice returns the existing enrollment.",
    responses={
        404: {"description": "No active class has this code"},
    },
)
def join_class(
    request: JoinClassRequest,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> Enrollment:
    enrollment = class_service.join_class(db, request.classCode, student.model_dump())
    print(f"[CLASSES] Student {student.id} enrollment {enrollment['id']} is {enrollment['status']}")
    return Enrollment(**enrollment)


@router.get(
    "/enrollments",
    response_model=EnrollmentListResponse,
    summary="List enrollments",
    description="Students get their own enrollments; teachers get enrollments in their classes, optionally filtered by status.",
)
def list_enrollments(
    status_filter: Optional[EnrollmentStatus] = Query(None, alias="status"),
    profile: BaseProfile = Depends(require_role("student", "teacher")),
    db=Depends(get_db),
) -> EnrollmentListResponse:
    if profile.role == "student":
        enrollments = class_service.list_student_enrollments(db, profile.id)
        if status_filter:
            enrollments = [e for e in enrollments if e.get("status") == status_filter]
    else:
        enrollments = class_service.list_teacher_enrollments(db, profile.id, status_filter)
    return EnrollmentListResponse(enrollments=[Enrollment(**e) for e in enrollments])


@router.patch(
    "/enrollments/{enrollment_id}",
    response_model=Enrollment,
    summary="Approve or reject enrollment",
    description="Lets the class teacher approve or reject a student's request.",
)
def update_enrollment(
    enrollment_id: str,
    request: UpdateEnrollmentRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> Enrollment:
    enrollment = class_service.set_enrollment_status(db, enrollment_id, teacher.id, request.status)
    print(f"[CLASSES] Enrollment {enrollment_id} set to {request.status} by {teacher.id}")
    return Enrollment(**enrollment)
