from typing import Dict, Any, Callable
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin.auth import (
    InvalidIdTokenError,
    ExpiredIdTokenError,
    RevokedIdTokenError,
    UserDisabledError,
    CertificateFetchError,
)
from pydantic import ValidationError

from educonnect.auth.firebase import get_firebase_auth
from educonnect.models.user import BaseProfile, parse_profile
from educonnect.services.firestore_service import get_db, get_document
from educonnect.errors import NotFoundError

security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict[str, Any]:
    """Validate the Firebase identity token and return a normalized user object.

    Args:
        credentials: HTTPBearer credentials containing the token in Authorization header

    Returns:
        Dict[str, Any]: uid, email, email_verified, name and phone_number

    Raises:
        HTTPException:
            - 401 if token is missing, invalid, expired, or revoked
            - 503 if there's an error fetching certificates for validation
    """
    token = credentials.credentials

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    auth_service = get_firebase_auth()

    try:
        decoded_token = auth_service.verify_id_token(token, check_revoked=False)

        return {
            "uid": decoded_token["uid"],
            "email": decoded_token.get("email"),
            "email_verified": decoded_token.get("email_verified", False),
            "name": decoded_token.get("name"),
            "phone_number": decoded_token.get("phone_number"),
        }

    except (InvalidIdTokenError, ExpiredIdTokenError) as e:
        print(f"[AUTH] Token validation failed: {type(e).__name__}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    except RevokedIdTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    except UserDisabledError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account has been disabled",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    except CertificateFetchError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service temporarily unavailable",
        ) from e

    except ValueError as e:
        print(f"[AUTH] Token format error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token format",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_current_profile(
    current_user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_db),
) -> BaseProfile:
    """Load the caller's ``users`` document as its role-specific profile.

    Raises:
        HTTPException: 403 if the account has no profile yet or the stored
            record has no valid role
    """
    try:
        data = get_document(db, "users", current_user["uid"], label="User profile")
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No profile found for this account. Please complete sign-up.",
        )

    try:
        return parse_profile(data)
    except ValidationError as e:
        print(f"[AUTH] Invalid profile for {current_user['uid']}: {e.error_count()} error(s)")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User profile is incomplete or has an unknown role",
        )


def require_role(*roles: str) -> Callable[..., BaseProfile]:
    """Build a dependency that only lets the given roles through.

    Example:
        @router.post("/classes")
        def create(profile: TeacherProfile = Depends(require_role("teacher"))): ...
    """

    def dependency(profile: BaseProfile = Depends(get_current_profile)) -> BaseProfile:
        if profile.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action is only available to: {', '.join(roles)}",
            )
        return profile

    return dependency
