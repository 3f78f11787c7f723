from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ClassRecord(BaseModel):
    """A class (batch) run by a teacher, joined by students with its code."""
    id: str
    teacherId: str
    teacherName: Optional[str] = None
    title: Optional[str] = None
    subject: str
    classLevel: str
    classCode: str = Field(..., description="6-character join code")
    batchTime: Optional[str] = None
    isActive: bool = True
    createdAt: Optional[datetime] = None


class CreateClassRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    classLevel: str = Field(..., min_length=1, description='e.g. "9-10" or "Class 10"')
    title: Optional[str] = Field(None, max_length=200)
    batchTime: Optional[str] = Field(None, description='e.g. "Mon/Wed 5pm"')


class JoinClassRequest(BaseModel):
    classCode: str = Field(..., min_length=1, max_length=12)


EnrollmentStatus = Literal["pending", "approved", "rejected"]


class Enrollment(BaseModel):
    id: str
    studentId: str
    studentName: Optional[str] = None
    mobileNumber: Optional[str] = None
    classId: str
    teacherId: Optional[str] = None
    classTitle: Optional[str] = None
    classSubject: Optional[str] = None
    teacherName: Optional[str] = None
    batchTime: Optional[str] = None
    status: EnrollmentStatus
    createdAt: Optional[datetime] = None


class UpdateEnrollmentRequest(BaseModel):
    status: Literal["approved", "rejected"]


class ClassListResponse(BaseModel):
    classes: List[ClassRecord]


class EnrollmentListResponse(BaseModel):
    enrollments: List[Enrollment]
