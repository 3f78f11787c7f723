from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status

from educonnect.auth.dependencies import get_current_profile, require_role
from educonnect.models.announcement import (
    ActiveAnnouncementsResponse,
    Announcement,
    ClassAnnouncement,
    ClassAnnouncementListResponse,
    CreateAnnouncementRequest,
    CreateClassAnnouncementRequest,
)
from educonnect.models.user import BaseProfile
from educonnect.services import announcement_service, class_service
from educonnect.services.firestore_service import get_db

router = APIRouter(
    prefix="/announcements",
    tags=["announcements"],
)


@router.post(
    "",
    response_model=Announcement,
    status_code=status.HTTP_201_CREATED,
    summary="Post announcement",
    description="Admin-only. Posts a marquee announcement for everyone, teachers or students.",
)
def create_announcement(
    request: CreateAnnouncementRequest,
    admin: BaseProfile = Depends(require_role("admin")),
    db=Depends(get_db),
) -> Announcement:
    created = announcement_service.create_announcement(db, request.message, request.target, request.expiresAt)
    print(f"[ANNOUNCEMENTS] {admin.id} posted announcement {created['id']} for {request.target}")
    return Announcement(**created)


@router.get(
    "/active",
    response_model=ActiveAnnouncementsResponse,
    summary="Get active announcements",
    description="Returns the unexpired announcements addressed to the caller's role, plus the joined marquee text.",
)
def get_active_announcements(
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> ActiveAnnouncementsResponse:
    now = datetime.now(timezone.utc)
    active = announcement_service.list_active_announcements(db, profile.role, now)
    return ActiveAnnouncementsResponse(
        announcements=[Announcement(**a) for a in active],
        marqueeText=announcement_service.marquee_text(active),
    )


@router.post(
    "/classes/{class_id}",
    response_model=ClassAnnouncement,
    status_code=status.HTTP_201_CREATED,
    summary="Post class announcement",
    description="Teacher-only. Posts an announcement to the students of one of the caller's classes.",
    responses={
        404: {"description": "Class not found or run by another teacher"},
    },
)
def create_class_announcement(
    class_id: str,
    request: CreateClassAnnouncementRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> ClassAnnouncement:
    class_data = class_service.get_owned_class(db, class_id, teacher.id)
    created = announcement_service.create_class_announcement(db, class_data, teacher.model_dump(), request.content)
    print(f"[ANNOUNCEMENTS] {teacher.id} posted class announcement {created['id']} to {class_id}")
    return ClassAnnouncement(**created)


@router.get(
    "/classes",
    response_model=ClassAnnouncementListResponse,
    summary="List class announcements",
    description="Student-only. Returns the announcements of every class the caller is approved in, newest first.",
)
def list_my_class_announcements(
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> ClassAnnouncementListResponse:
    enrollments = class_service.list_student_enrollments(db, student.id)
    class_ids = [e["classId"] for e in enrollments if e.get("status") == "approved"]
    if not class_ids:
        return ClassAnnouncementListResponse(announcements=[])

    announcements = announcement_service.list_class_announcements(db, class_ids)
    return ClassAnnouncementListResponse(
        announcements=[ClassAnnouncement(**a) for a in announcements],
    )
