from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime, timezone
from pydantic import ValidationError

from educonnect.auth.dependencies import get_current_profile
from educonnect.models.user import (
    BaseProfile,
    COMMON_EDITABLE_FIELDS,
    ROLE_EDITABLE_FIELDS,
    ProfileUpdateRequest,
    parse_profile,
)
from educonnect.services.firestore_service import get_db, update_document

router = APIRouter(
    prefix="/me",
    tags=["user"],
)


@router.get(
    "",
    summary="Get current user profile",
    description="Returns the current user's role-specific profile from Firestore.",
    responses={
        200: {
            "description": "Successfully retrieved user profile",
            "content": {
                "application/json": {
                    "example": {
                        "id": "user123",
                        "name": "Asha Verma",
                        "email": "9876543210@edconnect.pro",
                        "mobileNumber": "9876543210",
                        "role": "student",
                        "classLevel": "Class 10",
                        "coins": 35,
                        "streak": 4,
                    }
                }
            },
        },
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        403: {
            "description": "No profile exists for this account",
        },
    },
)
def get_me(
    profile: BaseProfile = Depends(get_current_profile),
) -> Dict[str, Any]:
    """Get the current authenticated user's profile.

    Args:
        profile: The caller's parsed profile (injected via dependency)

    Returns:
        Dict[str, Any]: the profile with the fields of its role
    """
    return profile.model_dump(mode="json")


@router.patch(
    "",
    summary="Update current user profile",
    description="Updates the caller's common fields (name, mobile number, avatar) and the editable fields of their role.",
    responses={
        400: {
            "description": "No fields given, or a field that the caller's role cannot edit",
        },
    },
)
def update_me(
    request: ProfileUpdateRequest,
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> Dict[str, Any]:
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No profile fields were provided"
        )

    allowed = COMMON_EDITABLE_FIELDS | ROLE_EDITABLE_FIELDS.get(profile.role, set())
    rejected = sorted(set(updates) - allowed)
    if rejected:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"These fields cannot be edited for a {profile.role} profile: {', '.join(rejected)}"
        )

    for key, value in updates.items():
        if isinstance(value, str):
            updates[key] = value.strip()

    # Validate the merged profile before the write
    try:
        updated = parse_profile({**profile.model_dump(), **updates})
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in e.errors()})
        print(f"[ME] Rejected profile update for {profile.id}: {fields}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid value for: {', '.join(fields)}"
        )

    updates["updatedAt"] = datetime.now(timezone.utc)
    update_document(db, "users", profile.id, updates)
    print(f"[ME] Updated profile fields for {profile.id}: {sorted(k for k in updates if k != 'updatedAt')}")

    return updated.model_dump(mode="json")
