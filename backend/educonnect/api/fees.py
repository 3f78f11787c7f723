from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool

from educonnect.api.bookings import get_payment_simulators
from educonnect.auth.dependencies import require_role
from educonnect.models.booking import (
    FeeListResponse,
    FeeRecord,
    PaymentStatusResponse,
    SetFeeStatusRequest,
)
from educonnect.models.user import BaseProfile
from educonnect.services import booking_service, class_service
from educonnect.services.firestore_service import get_db
from educonnect.services.payment_service import (
    PAYMENT_FAILED_MESSAGE,
    PaymentSimulatorRegistry,
)

router = APIRouter(
    prefix="/fees",
    tags=["fees"],
)


@router.put(
    "",
    response_model=FeeRecord,
    summary="Set fee status",
    description="Marks a student's fee for a month as paid or unpaid, creating the record if needed.",
    responses={
        404: {"description": "Class not found or student not enrolled"},
    },
)
def set_fee_status(
    request: SetFeeStatusRequest,
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> FeeRecord:
    fee = booking_service.set_fee_status(
        db,
        teacher_id=teacher.id,
        student_id=request.studentId,
        class_id=request.classId,
        fee_month=request.feeMonth,
        fee_year=request.feeYear,
        status=request.status,
    )
    print(f"[FEES] {request.feeMonth} {request.feeYear} fee of {request.studentId} set to {request.status}")
    return FeeRecord(**fee)


@router.get(
    "/class/{class_id}",
    response_model=FeeListResponse,
    summary="List class fees",
    description="Returns the fee records of a class, optionally for one month.",
)
def list_class_fees(
    class_id: str,
    fee_month: Optional[str] = Query(None, alias="month"),
    fee_year: Optional[int] = Query(None, alias="year"),
    teacher: BaseProfile = Depends(require_role("teacher")),
    db=Depends(get_db),
) -> FeeListResponse:
    class_service.get_owned_class(db, class_id, teacher.id)
    fees = booking_service.list_class_fees(db, class_id, fee_month, fee_year)
    return FeeListResponse(fees=[FeeRecord(**f) for f in fees])


@router.get(
    "",
    response_model=FeeListResponse,
    summary="List my fees",
    description="Returns the current student's fee records.",
)
def list_my_fees(
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
) -> FeeListResponse:
    fees = booking_service.list_student_fees(db, student.id)
    return FeeListResponse(fees=[FeeRecord(**f) for f in fees])


@router.post(
    "/{fee_id}/pay",
    response_model=PaymentStatusResponse,
    summary="Pay fee",
    description="Simulates paying a monthly fee. The record is marked paid after a short processing delay.",
    responses={
        404: {"description": "Fee record not found"},
        409: {"description": "A payment for this fee is already processing"},
        500: {"description": "Payment failed. Please try again."},
    },
)
async def pay_fee(
    fee_id: str,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
    simulators: PaymentSimulatorRegistry = Depends(get_payment_simulators),
) -> PaymentStatusResponse:
    fee = await run_in_threadpool(booking_service.get_student_fee, db, fee_id, student.id)
    if fee.get("status") == "paid":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This fee is already paid"
        )

    simulator = simulators.get("fees", fee_id)
    print(f"[FEES] Processing payment for fee {fee_id} ({fee.get('feeMonth')} {fee.get('feeYear')})")
    paid = await simulator.confirm(
        lambda: run_in_threadpool(booking_service.mark_fee_paid, db, fee_id)
    )
    if not paid:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=PAYMENT_FAILED_MESSAGE
        )
    return PaymentStatusResponse(**simulator.snapshot())


@router.get(
    "/{fee_id}/payment",
    response_model=PaymentStatusResponse,
    summary="Get payment state",
    description="Reports whether the fee's simulated payment is idle, processing or succeeded.",
)
def get_fee_payment(
    fee_id: str,
    student: BaseProfile = Depends(require_role("student")),
    db=Depends(get_db),
    simulators: PaymentSimulatorRegistry = Depends(get_payment_simulators),
) -> PaymentStatusResponse:
    booking_service.get_student_fee(db, fee_id, student.id)
    simulator = simulators.peek("fees", fee_id)
    if simulator is None:
        return PaymentStatusResponse(state="idle")
    return PaymentStatusResponse(**simulator.snapshot())
