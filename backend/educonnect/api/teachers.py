from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from educonnect.auth.dependencies import get_current_profile
from educonnect.errors import NotFoundError
from educonnect.models.user import BaseProfile
from educonnect.services.firestore_service import get_db, get_document, stream_query
from educonnect.services.messaging_service import build_whatsapp_link, teacher_contact_message

router = APIRouter(
    prefix="/teachers",
    tags=["teachers"],
)


class TeacherSummary(BaseModel):
    """Public part of a teacher profile shown in the marketplace."""
    id: str
    name: str
    teacherType: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    qualification: Optional[str] = None
    experience: Optional[str] = None
    coachingName: Optional[str] = None
    address: Optional[str] = None
    avatarUrl: Optional[str] = None
    isVerified: bool = False


class TeacherDetail(TeacherSummary):
    contactUrl: Optional[str] = Field(None, description="WhatsApp link to contact the teacher, if a number is saved")


class TeacherListResponse(BaseModel):
    teachers: List[TeacherSummary]


@router.get(
    "",
    response_model=TeacherListResponse,
    summary="Find teachers",
    description="Lists teacher profiles, optionally only those teaching a subject.",
)
def list_teachers(
    subject: Optional[str] = Query(None, description='Subject filter, e.g. "Physics"'),
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> TeacherListResponse:
    query = db.collection("users").where("role", "==", "teacher")
    if subject:
        query = query.where("subjects", "array_contains", subject.strip())
    teachers = stream_query(query, "users")
    return TeacherListResponse(teachers=[TeacherSummary(**t) for t in teachers])


@router.get(
    "/{teacher_id}",
    response_model=TeacherDetail,
    summary="Get teacher",
    description="Returns a teacher's public profile and a WhatsApp contact link.",
    responses={
        404: {"description": "Teacher not found"},
    },
)
def get_teacher(
    teacher_id: str,
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> TeacherDetail:
    teacher = get_document(db, "users", teacher_id, label="Teacher")
    if teacher.get("role") != "teacher":
        raise NotFoundError("Teacher not found")

    contact_url = None
    phone_number = teacher.get("whatsappNumber") or teacher.get("mobileNumber")
    if phone_number:
        try:
            contact_url = build_whatsapp_link(phone_number, teacher_contact_message(teacher["name"]))
        except ValueError:
            print(f"[TEACHERS] Teacher {teacher_id} has an unusable phone number")

    return TeacherDetail(**teacher, contactUrl=contact_url)
