from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool

from educonnect.auth.dependencies import require_role
from educonnect.models.booking import (
    BookingListResponse,
    BookingStatus,
    CreateBookingRequest,
    HomeBooking,
    PaymentStatusResponse,
    UpdateBookingStatusRequest,
)
from educonnect.models.user import BaseProfile
from educonnect.services import booking_service
from educonnect.services.firestore_service import get_db
from educonnect.services.payment_service import (
    PAYMENT_FAILED_MESSAGE,
    PaymentSimulatorRegistry,
)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


def get_payment_simulators(request: Request) -> PaymentSimulatorRegistry:
    """Registry of per-record payment simulators owned by the application."""
    return request.app.state.payment_simulators


@router.post(
    "",
    response_model=HomeBooking,
    status_code=status.HTTP_201_CREATED,
    summary="Book a home tutor or coaching seat",
    description="Creates a Pending booking with an unpaid platform fee.",
    responses={
        400: {"description": "Missing address for a home tutor booking"},
    },
)
def create_booking(
    request: CreateBookingRequest,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> HomeBooking:
    try:
        created = booking_service.create_booking(db, student.id, request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    print(f"[BOOKINGS] {request.bookingType} booking {created['id']} created by {student.id}")
    return HomeBooking(**created)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List my bookings",
    description="Returns the current student's bookings, newest first.",
)
def list_my_bookings(
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> BookingListResponse:
    bookings = booking_service.list_student_bookings(db, student.id)
    return BookingListResponse(bookings=[HomeBooking(**b) for b in bookings])


@router.get(
    "/all",
    response_model=BookingListResponse,
    summary="List all bookings",
    description="Admin-only. Returns every booking, optionally filtered by status.",
)
def list_all_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    admin: BaseProfile = Depends(require_role("admin")),
    db=Depends(get_db),
) -> BookingListResponse:
    bookings = booking_service.list_all_bookings(db, status_filter)
    return BookingListResponse(bookings=[HomeBooking(**b) for b in bookings])


@router.patch(
    "/{booking_id}",
    response_model=HomeBooking,
    summary="Update booking status",
    description="Admin-only. Confirms or cancels a booking.",
)
def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    admin: BaseProfile = Depends(require_role("admin")),
    db=Depends(get_db),
) -> HomeBooking:
    booking = booking_service.set_booking_status(db, booking_id, request.status)
    print(f"[BOOKINGS] Booking {booking_id} set to {request.status} by {admin.id}")
    return HomeBooking(**booking)


@router.post(
    "/{booking_id}/pay",
    response_model=PaymentStatusResponse,
    summary="Pay platform fee",
    description="Simulates paying the platform fee. The booking is marked paid after a short processing delay.",
    responses={
        404: {"description": "Booking not found"},
        409: {"description": "A payment for this booking is already processing"},
        500: {"description": "Payment failed. Please try again."},
    },
)
async def pay_booking(
    booking_id: str,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
    simulators: PaymentSimulatorRegistry = Depends(get_payment_simulators),
) -> PaymentStatusResponse:
    booking = await run_in_threadpool(booking_service.get_student_booking, db, booking_id, student.id)
    if booking.get("paymentStatus") == "paid":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This booking is already paid"
        )

    simulator = simulators.get("homeBookings", booking_id)
    print(f"[BOOKINGS] Processing payment of {booking.get('platformFee')} for booking {booking_id}")
    paid = await simulator.confirm(
        lambda: run_in_threadpool(booking_service.mark_booking_paid, db, booking_id)
    )
    if not paid:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=PAYMENT_FAILED_MESSAGE
        )
    return PaymentStatusResponse(**simulator.snapshot())


@router.get(
    "/{booking_id}/payment",
    response_model=PaymentStatusResponse,
    summary="Get payment state",
    description="Reports whether the booking's simulated payment is idle, processing or succeeded.",
)
def get_booking_payment(
    booking_id: str,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
    simulators: PaymentSimulatorRegistry = Depends(get_payment_simulators),
) -> PaymentStatusResponse:
    booking_service.get_student_booking(db, booking_id, student.id)
    simulator = simulators.peek("homeBookings", booking_id)
    if simulator is None:
        return PaymentStatusResponse(state="idle")
    return PaymentStatusResponse(**simulator.snapshot())
