"""
Sign-in pass-through to Firebase Authentication.

Password, Google and phone OTP sign-in go through the Identity Toolkit REST
API with the project's web API key. Account creation uses the Admin SDK.
Firebase error codes are mapped to messages that can be shown to users.
"""
import os
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests
from firebase_admin import auth as firebase_auth
from dotenv import load_dotenv

from educonnect.auth.firebase import get_firebase_auth
from educonnect.errors import AuthenticationError
from educonnect.models.user import (
    StudentSignupRequest,
    TeacherSignupRequest,
)
from educonnect.services import class_service
from educonnect.services.firestore_service import guarded

load_dotenv()

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{method}"
REQUEST_TIMEOUT = 15
MOBILE_EMAIL_DOMAIN = "edconnect.pro"

AUTH_ERROR_MESSAGES = {
    "INVALID_LOGIN_CREDENTIALS": "Invalid mobile number or password.",
    "INVALID_PASSWORD": "Invalid mobile number or password.",
    "EMAIL_NOT_FOUND": "Invalid mobile number or password.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
    "INVALID_CODE": "The code you entered is incorrect.",
    "SESSION_EXPIRED": "The verification code has expired. Please request a new one.",
    "INVALID_PHONE_NUMBER": "Please enter a valid phone number with country code.",
    "EMAIL_EXISTS": "This email address is already in use by another account.",
    "INVALID_IDP_RESPONSE": "Google sign-in failed. Please try again.",
}


def friendly_auth_message(code: str) -> str:
    """Map a Firebase error code to a user-facing message, or return it verbatim."""
    # Codes can carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access ..."
    base_code = code.split(":")[0].strip()
    return AUTH_ERROR_MESSAGES.get(base_code, code)


def email_for_identifier(identifier: str) -> str:
    """Accounts created with a mobile number sign in as ``<mobile>@edconnect.pro``."""
    identifier = identifier.strip()
    if "@" in identifier:
        return identifier.lower()
    return f"{identifier}@{MOBILE_EMAIL_DOMAIN}"


def _web_api_key() -> str:
    api_key = os.getenv("FIREBASE_WEB_API_KEY")
    if not api_key:
        raise ValueError("FIREBASE_WEB_API_KEY environment variable is not set")
    return api_key


def call_identity_toolkit(method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST to an Identity Toolkit ``accounts:<method>`` endpoint.

    Raises:
        AuthenticationError: Firebase rejected the request
    """
    response = requests.post(
        IDENTITY_TOOLKIT_URL.format(method=method),
        params={"key": _web_api_key()},
        json=payload,
        timeout=REQUEST_TIMEOUT,
    )
    body = response.json() if response.content else {}
    if response.status_code != 200:
        code = body.get("error", {}).get("message", "UNKNOWN_ERROR")
        logger.info("Identity Toolkit %s failed with %s", method, code)
        raise AuthenticationError(friendly_auth_message(code), code=code)
    return body


def sign_in_with_password(identifier: str, password: str) -> Dict[str, Any]:
    return call_identity_toolkit("signInWithPassword", {
        "email": email_for_identifier(identifier),
        "password": password,
        "returnSecureToken": True,
    })


def sign_in_with_google(google_id_token: str, request_uri: str) -> Dict[str, Any]:
    return call_identity_toolkit("signInWithIdp", {
        "postBody": f"id_token={google_id_token}&providerId=google.com",
        "requestUri": request_uri,
        "returnIdpCredential": True,
        "returnSecureToken": True,
    })


def send_phone_code(phone_number: str, recaptcha_token: str) -> str:
    """Ask Firebase to text an OTP; returns the sessionInfo needed to verify it."""
    body = call_identity_toolkit("sendVerificationCode", {
        "phoneNumber": phone_number,
        "recaptchaToken": recaptcha_token,
    })
    return body["sessionInfo"]


def verify_phone_code(session_info: str, code: str) -> Dict[str, Any]:
    return call_identity_toolkit("signInWithPhoneNumber", {
        "sessionInfo": session_info,
        "code": code.strip(),
    })


def generate_referral_code() -> str:
    return uuid.uuid4().hex[:8].upper()


def _create_auth_user(email: str, password: str, name: str) -> str:
    auth_service = get_firebase_auth()
    try:
        user_record = auth_service.create_user(email=email, password=password, display_name=name)
    except firebase_auth.EmailAlreadyExistsError as e:
        raise AuthenticationError(
            AUTH_ERROR_MESSAGES["EMAIL_EXISTS"], code="EMAIL_EXISTS", status_code=400
        ) from e
    return user_record.uid


def sign_up_student(db, request: StudentSignupRequest) -> Dict[str, Any]:
    """Create a student account and profile, joining a class if a valid code is given.

    An unknown class code does not fail the sign-up; the student can join
    later from the dashboard.
    """
    uid = _create_auth_user(request.email, request.password, request.name)
    profile = {
        "id": uid,
        "name": request.name.strip(),
        "email": request.email,
        "mobileNumber": request.mobileNumber.strip(),
        "classLevel": request.classLevel,
        "role": "student",
        "status": "approved",
        "coins": 0,
        "streak": 0,
        "lastLoginDate": None,
        "createdAt": datetime.now(timezone.utc),
    }
    with guarded("create", f"users/{uid}"):
        db.collection("users").document(uid).set(profile)

    enrollment = None
    if request.classCode and request.classCode.strip():
        class_data = class_service.find_class_by_code(db, request.classCode)
        if class_data:
            enrollment = class_service.create_enrollment(db, class_data, profile, status="approved")
        else:
            logger.warning("Invalid class code entered during signup for %s", uid)

    return {"profile": profile, "enrollment": enrollment}


def sign_up_teacher(db, request: TeacherSignupRequest) -> Dict[str, Any]:
    uid = _create_auth_user(request.email, request.password, request.name)
    profile = new_teacher_profile(uid, request.name.strip(), request.email)
    profile.update({
        "mobileNumber": request.mobileNumber.strip(),
        "teacherType": request.teacherType,
        "subjects": request.subjects,
    })
    with guarded("create", f"users/{uid}"):
        db.collection("users").document(uid).set(profile)
    return {"profile": profile}


def new_teacher_profile(uid: str, name: str, email: Optional[str]) -> Dict[str, Any]:
    return {
        "id": uid,
        "name": name,
        "email": email,
        "role": "teacher",
        "teacherType": "coaching",
        "subjects": [],
        "isVerified": False,
        "coins": 0,
        "streak": 0,
        "lastLoginDate": None,
        "referralCode": generate_referral_code(),
        "createdAt": datetime.now(timezone.utc),
    }


def ensure_google_teacher_profile(db, session: Dict[str, Any]) -> Dict[str, Any]:
    """Create a default teacher profile on first Google sign-in.

    Raises:
        AuthenticationError: the Google account already belongs to a student
    """
    uid = session["localId"]
    doc_ref = db.collection("users").document(uid)
    with guarded("get", f"users/{uid}"):
        existing = doc_ref.get()

    if existing.exists:
        data = existing.to_dict() or {}
        if data.get("role") == "student":
            raise AuthenticationError(
                "This account is registered as a student. Please use the student login.",
                code="ROLE_MISMATCH",
                status_code=403,
            )
        return data

    email = session.get("email")
    name = session.get("displayName") or (email.split("@")[0] if email else "Teacher")
    profile = new_teacher_profile(uid, name, email)
    with guarded("create", f"users/{uid}"):
        doc_ref.set(profile)
    logger.info("Created teacher profile for Google account %s", uid)
    return profile
