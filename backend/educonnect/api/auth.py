from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from educonnect.auth.dependencies import get_current_user
from educonnect.models.user import (
    GoogleLoginRequest,
    LoginRequest,
    PhoneCodeRequest,
    PhoneCodeResponse,
    PhoneVerifyRequest,
    SessionResponse,
    StudentSignupRequest,
    TeacherSignupRequest,
)
from educonnect.services import identity_service
from educonnect.services.firestore_service import get_db, guarded

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
)


class SignupResponse(BaseModel):
    """Result of creating an account and its profile."""
    uid: str
    role: str
    enrollmentId: Optional[str] = None
    enrollmentStatus: Optional[str] = None


def _stored_role(db, uid: str) -> Optional[str]:
    with guarded("get", f"users/{uid}"):
        doc = db.collection("users").document(uid).get()
    if not doc.exists:
        return None
    return (doc.to_dict() or {}).get("role")


def _session_response(session: Dict[str, Any], role: Optional[str]) -> SessionResponse:
    expires_in = session.get("expiresIn")
    return SessionResponse(
        uid=session["localId"],
        idToken=session["idToken"],
        refreshToken=session.get("refreshToken"),
        expiresIn=int(expires_in) if expires_in else None,
        role=role,
        isNewUser=bool(session.get("isNewUser", False)),
    )


@router.get(
    "/me",
    summary="Get current authenticated user",
    description="Returns information about the currently authenticated user based on their identity token.",
    responses={
        200: {
            "description": "Successfully retrieved user information",
            "content": {
                "application/json": {
                    "example": {
                        "uid": "user123",
                        "email": "9876543210@edconnect.pro",
                        "email_verified": False,
                        "name": "Asha Verma",
                        "phone_number": None,
                    }
                }
            },
        },
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_current_user_info(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Get information about the currently authenticated user.

    Args:
        current_user: The authenticated user object (injected via dependency)

    Returns:
        Dict[str, Any]: uid, email, email_verified, name and phone_number
    """
    return current_user


@router.post(
    "/signup/student",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up as a student",
    description="Creates the Firebase account and student profile. A valid class code joins the class right away; "
                "an unknown code is ignored and the student can join later.",
    responses={
        400: {"description": "This email address is already in use by another account."},
    },
)
def signup_student(
    request: StudentSignupRequest,
    db=Depends(get_db),
) -> SignupResponse:
    result = identity_service.sign_up_student(db, request)
    profile = result["profile"]
    enrollment = result["enrollment"]
    print(f"[AUTH] Student signed up: {profile['id']} (class joined: {enrollment is not None})")
    return SignupResponse(
        uid=profile["id"],
        role="student",
        enrollmentId=enrollment["id"] if enrollment else None,
        enrollmentStatus=enrollment["status"] if enrollment else None,
    )


@router.post(
    "/signup/teacher",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up as a teacher",
    description="Creates the Firebase account and a teacher profile with a referral code.",
    responses={
        400: {"description": "This email address is already in use by another account."},
    },
)
def signup_teacher(
    request: TeacherSignupRequest,
    db=Depends(get_db),
) -> SignupResponse:
    result = identity_service.sign_up_teacher(db, request)
    print(f"[AUTH] Teacher signed up: {result['profile']['id']}")
    return SignupResponse(uid=result["profile"]["id"], role="teacher")


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Sign in with password",
    description="Signs in with an email address or mobile number and a password.",
    responses={
        401: {"description": "Invalid mobile number or password."},
    },
)
def login(
    request: LoginRequest,
    db=Depends(get_db),
) -> SessionResponse:
    session = identity_service.sign_in_with_password(request.identifier, request.password)
    role = _stored_role(db, session["localId"])
    print(f"[AUTH] Password sign-in for {session['localId']} (role: {role})")
    return _session_response(session, role)


@router.post(
    "/google",
    response_model=SessionResponse,
    summary="Sign in with Google",
    description="Teacher login with a Google ID token. First sign-in creates a default coaching teacher profile.",
    responses={
        401: {"description": "Google sign-in failed"},
        403: {"description": "The Google account belongs to a student"},
    },
)
def login_with_google(
    request: GoogleLoginRequest,
    db=Depends(get_db),
) -> SessionResponse:
    session = identity_service.sign_in_with_google(request.googleIdToken, request.requestUri)
    profile = identity_service.ensure_google_teacher_profile(db, session)
    print(f"[AUTH] Google sign-in for {session['localId']}")
    return _session_response(session, profile.get("role"))


@router.post(
    "/phone/send-code",
    response_model=PhoneCodeResponse,
    summary="Send phone OTP",
    description="Asks Firebase to text a 6-digit verification code to the phone number.",
)
def send_phone_code(request: PhoneCodeRequest) -> PhoneCodeResponse:
    session_info = identity_service.send_phone_code(request.phoneNumber, request.recaptchaToken)
    print("[AUTH] Phone verification code requested")
    return PhoneCodeResponse(sessionInfo=session_info)


@router.post(
    "/phone/verify",
    response_model=SessionResponse,
    summary="Verify phone OTP",
    description="Signs in with the 6-digit code texted to the phone.",
    responses={
        401: {"description": "The code you entered is incorrect."},
    },
)
def verify_phone_code(
    request: PhoneVerifyRequest,
    db=Depends(get_db),
) -> SessionResponse:
    session = identity_service.verify_phone_code(request.sessionInfo, request.code)
    role = _stored_role(db, session["localId"])
    print(f"[AUTH] Phone sign-in for {session['localId']} (new user: {session.get('isNewUser', False)})")
    return _session_response(session, role)
