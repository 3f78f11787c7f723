from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from educonnect.services.payment_service import PLATFORM_FEE, PaymentState


BookingType = Literal["homeTutor", "coachingSeat"]
TuitionType = Literal["single_student", "siblings"]
BookingStatus = Literal["Pending", "Confirmed", "Cancelled"]
FeeStatus = Literal["paid", "unpaid"]


class HomeBooking(BaseModel):
    """A home tutor or coaching seat request made by a student."""
    id: str
    studentId: str
    studentName: str
    fatherName: Optional[str] = None
    mobileNumber: str
    studentClass: str
    subject: str
    studentAddress: Optional[str] = None
    bookingType: BookingType
    tuitionType: TuitionType = "single_student"
    status: BookingStatus = "Pending"
    paymentStatus: FeeStatus = "unpaid"
    platformFee: int = PLATFORM_FEE
    paidAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class CreateBookingRequest(BaseModel):
    studentName: str = Field(..., min_length=1, max_length=255)
    fatherName: Optional[str] = None
    mobileNumber: str = Field(..., min_length=10, max_length=15)
    studentClass: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    studentAddress: Optional[str] = Field(None, description="Required for home tutor bookings")
    bookingType: BookingType = "homeTutor"
    tuitionType: TuitionType = "single_student"


class UpdateBookingStatusRequest(BaseModel):
    status: BookingStatus


class BookingListResponse(BaseModel):
    bookings: List[HomeBooking]


class FeeRecord(BaseModel):
    """Monthly fee status of a student in a class."""
    id: str
    studentId: str
    studentName: Optional[str] = None
    teacherId: str
    classId: str
    feeMonth: str = Field(..., description='Month name, e.g. "January"')
    feeYear: int
    status: FeeStatus = "unpaid"
    paidOn: Optional[datetime] = None


class SetFeeStatusRequest(BaseModel):
    studentId: str = Field(..., min_length=1)
    classId: str = Field(..., min_length=1)
    feeMonth: str = Field(..., min_length=1)
    feeYear: int = Field(..., ge=2000, le=2100)
    status: FeeStatus


class FeeListResponse(BaseModel):
    fees: List[FeeRecord]


class PaymentStatusResponse(BaseModel):
    """State of the simulated payment for one booking or fee record."""
    state: PaymentState
    error: Optional[str] = None
