from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime


AnnouncementTarget = Literal["all", "teachers", "students"]


class Announcement(BaseModel):
    """Site-wide message shown in the dashboard marquee."""
    id: str
    message: str
    target: AnnouncementTarget
    createdAt: Optional[datetime] = None
    expiresAt: Optional[datetime] = Field(None, description="No expiry means always active")


class CreateAnnouncementRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=500)
    target: AnnouncementTarget = "all"
    expiresAt: Optional[datetime] = None


class ActiveAnnouncementsResponse(BaseModel):
    announcements: List[Announcement]
    marqueeText: str = Field(..., description='Messages joined with " ••• ", empty when nothing is active')


class ClassAnnouncement(BaseModel):
    """Message a teacher posts to the students of one class."""
    id: str
    classId: str
    classTitle: str = ""
    teacherId: str
    teacherName: str = ""
    content: str
    createdAt: Optional[datetime] = None


class CreateClassAnnouncementRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000, description="Announcement text, e.g. an AI-generated draft")


class ClassAnnouncementListResponse(BaseModel):
    announcements: List[ClassAnnouncement]
