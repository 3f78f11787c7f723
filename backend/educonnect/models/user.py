from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, TypeAdapter


Role = Literal["teacher", "student", "parent", "admin"]


class BaseProfile(BaseModel):
    """Fields shared by every profile stored in the ``users`` collection.

    The concrete profile type is selected by ``role``; see ``UserProfile``.
    """

    id: str = Field(..., min_length=1, description="Firebase user UID")
    name: str = Field(..., description="Display name")
    email: Optional[str] = Field(None, description="Login email (may be a mobile-derived address)")
    mobileNumber: Optional[str] = Field(None, description="Mobile number")
    avatarUrl: Optional[str] = Field(None, description="Profile picture URL")
    createdAt: Optional[datetime] = Field(None, description="When the profile was created")
    coins: int = Field(0, ge=0, description="Reward coins collected")
    streak: int = Field(0, ge=0, description="Current daily check-in streak")
    lastLoginDate: Optional[str] = Field(None, description="Last check-in date (YYYY-MM-DD)")


class TeacherProfile(BaseProfile):
    role: Literal["teacher"] = "teacher"
    teacherType: Literal["coaching", "school", "home_tutor"] = "coaching"
    subjects: List[str] = Field(default_factory=list)
    qualification: Optional[str] = None
    experience: Optional[str] = None
    coachingName: Optional[str] = None
    address: Optional[str] = None
    whatsappNumber: Optional[str] = None
    isVerified: bool = False
    referralCode: Optional[str] = None


class StudentProfile(BaseProfile):
    role: Literal["student"] = "student"
    classLevel: Optional[str] = None
    fatherName: Optional[str] = None
    homeAddress: Optional[str] = None
    parentMobileNumber: Optional[str] = None
    status: Literal["approved", "pending"] = "approved"


class ParentProfile(BaseProfile):
    role: Literal["parent"] = "parent"
    childStudentIds: List[str] = Field(default_factory=list)


class AdminProfile(BaseProfile):
    role: Literal["admin"] = "admin"


UserProfile = Annotated[
    Union[TeacherProfile, StudentProfile, ParentProfile, AdminProfile],
    Field(discriminator="role"),
]

_profile_adapter = TypeAdapter(UserProfile)


def parse_profile(data: Dict[str, Any]) -> Union[TeacherProfile, StudentProfile, ParentProfile, AdminProfile]:
    """Validate a raw ``users`` document into its role-specific profile.

    Raises:
        pydantic.ValidationError: role is missing/unknown or a field is invalid
    """
    return _profile_adapter.validate_python(data)


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields. Role-specific fields are rejected for other roles."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    mobileNumber: Optional[str] = None
    avatarUrl: Optional[str] = None
    # teacher
    subjects: Optional[List[str]] = None
    qualification: Optional[str] = None
    experience: Optional[str] = None
    coachingName: Optional[str] = None
    address: Optional[str] = None
    whatsappNumber: Optional[str] = None
    # student
    classLevel: Optional[str] = None
    fatherName: Optional[str] = None
    homeAddress: Optional[str] = None
    parentMobileNumber: Optional[str] = None


COMMON_EDITABLE_FIELDS = {"name", "mobileNumber", "avatarUrl"}
ROLE_EDITABLE_FIELDS: Dict[str, set] = {
    "teacher": {"subjects", "qualification", "experience", "coachingName", "address", "whatsappNumber"},
    "student": {"classLevel", "fatherName", "homeAddress", "parentMobileNumber"},
    "parent": set(),
    "admin": set(),
}


class StudentSignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    mobileNumber: str = Field(..., min_length=10, max_length=15)
    classLevel: str = Field(..., min_length=1)
    classCode: Optional[str] = Field(None, description="Optional class code to join right away")


class TeacherSignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    mobileNumber: str = Field(..., min_length=10, max_length=15)
    teacherType: Literal["coaching", "school", "home_tutor"] = "coaching"
    subjects: List[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    """Password sign-in with either an email or a 10-digit mobile number."""

    identifier: str = Field(..., min_length=1, description="Email address or mobile number")
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(BaseModel):
    googleIdToken: str = Field(..., min_length=1)
    requestUri: str = Field("http://localhost", description="Continue URI registered for the web app")


class PhoneCodeRequest(BaseModel):
    phoneNumber: str = Field(..., min_length=8, description="E.164 phone number")
    recaptchaToken: str = Field(..., min_length=1)


class PhoneVerifyRequest(BaseModel):
    sessionInfo: str = Field(..., min_length=1)
    code: str = Field(..., min_length=6, max_length=6, description="6-digit OTP code")


class SessionResponse(BaseModel):
    """Tokens returned by Firebase Auth after a successful sign-in."""

    uid: str
    idToken: str
    refreshToken: Optional[str] = None
    expiresIn: Optional[int] = None
    role: Optional[Role] = None
    isNewUser: bool = False


class PhoneCodeResponse(BaseModel):
    sessionInfo: str
    message: str = "OTP sent. Please check your phone for the verification code."
