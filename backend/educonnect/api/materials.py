from typing import List, Literal, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from educonnect.auth.dependencies import get_current_profile, require_role
from educonnect.models.user import BaseProfile
from educonnect.services import class_service
from educonnect.services.firestore_service import add_document, get_db, stream_query

router = APIRouter(
    prefix="/materials",
    tags=["materials"],
)

MaterialType = Literal["Notes", "DPP", "Test", "Solution"]


class StudyMaterial(BaseModel):
    """Response model for a study material record."""
    id: str
    title: str
    classId: Optional[str] = None
    teacherId: str
    type: MaterialType = "Notes"
    subject: Optional[str] = None
    chapter: Optional[str] = None
    fileUrl: Optional[str] = None
    isFree: bool = True
    createdAt: Optional[datetime] = None


class UploadMaterialRequest(BaseModel):
    """Request model for publishing a study material."""
    title: str = Field(..., min_length=1, max_length=200)
    classId: Optional[str] = Field(None, description="Class the material belongs to; omit for free public material")
    type: MaterialType = "Notes"
    subject: Optional[str] = None
    chapter: Optional[str] = None
    fileUrl: Optional[str] = Field(None, description="Link to the uploaded file")
    isFree: bool = True


class MaterialListResponse(BaseModel):
    materials: List[StudyMaterial]


def _newest_first(materials):
    return sorted(materials, key=lambda m: m.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc), reverse=True)


@router.post(
    "",
    response_model=StudyMaterial,
    status_code=status.HTTP_201_CREATED,
    summary="Upload study material",
    description="Publishes notes, a DPP, a test or solutions for one of the teacher's classes.",
)
def upload_material(
    request: UploadMaterialRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> StudyMaterial:
    if request.classId:
        class_service.get_owned_class(db, request.classId, teacher.id)

    created = add_document(db, "studyMaterials", {
        "title": request.title.strip(),
        "classId": request.classId,
        "teacherId": teacher.id,
        "type": request.type,
        "subject": request.subject,
        "chapter": request.chapter,
        "fileUrl": request.fileUrl,
        "isFree": request.isFree,
        "createdAt": datetime.now(timezone.utc),
    })
    print(f"[MATERIALS] Teacher {teacher.id} uploaded {request.type} '{request.title}'")
    return StudyMaterial(**created)


@router.get(
    "/free",
    response_model=MaterialListResponse,
    summary="List free materials",
    description="Returns every material marked as free, newest first.",
)
def list_free_materials(
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> MaterialListResponse:
    query = db.collection("studyMaterials").where("isFree", "==", True)
    materials = stream_query(query, "studyMaterials")
    return MaterialListResponse(materials=[StudyMaterial(**m) for m in _newest_first(materials)])


@router.get(
    "/class/{class_id}",
    response_model=MaterialListResponse,
    summary="List class materials",
    description="Returns the materials of a class, optionally only one type (e.g. DPP).",
)
def list_class_materials(
    class_id: str,
    material_type: Optional[MaterialType] = Query(None, alias="type"),
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> MaterialListResponse:
    query = db.collection("studyMaterials").where("classId", "==", class_id)
    if material_type:
        query = query.where("type", "==", material_type)
    materials = stream_query(query, "studyMaterials")
    return MaterialListResponse(materials=[StudyMaterial(**m) for m in _newest_first(materials)])
