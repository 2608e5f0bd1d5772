from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from scolarite.auth.dependencies import get_current_user
from scolarite.auth.rbac import require_role
from scolarite.auth.schemas import CurrentUser
from scolarite.core.enums import UserRole
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import (
    AllocationResult,
    AmountPaidResponse,
    CleanupResult,
    InstallmentBalance,
    OutstandingBalance,
    PaymentCreate,
    PaymentResponse,
    StudentStatement,
)
from . import service, settlement

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "/student/{student_id}",
    response_model=AllocationResult,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    student_id: str,
    payload: PaymentCreate,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> AllocationResult:
    """Record a payment; tuition without an installment is spread automatically."""
    try:
        return await service.record_payment(store, student_id, payload, recorded_by=current_user.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}",
    response_model=List[PaymentResponse],
    dependencies=[Depends(get_current_user)],
)
async def get_payment_history(
    student_id: str,
    store: RecordStore = Depends(get_store),
) -> List[PaymentResponse]:
    try:
        return await service.get_payment_history(store, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}/statement",
    response_model=StudentStatement,
    dependencies=[Depends(get_current_user)],
)
async def get_student_statement(
    student_id: str,
    store: RecordStore = Depends(get_store),
) -> StudentStatement:
    try:
        return await settlement.get_student_statement(store, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}/installments/{ordinal}",
    response_model=InstallmentBalance,
    dependencies=[Depends(get_current_user)],
)
async def get_installment_balance(
    student_id: str,
    ordinal: int,
    store: RecordStore = Depends(get_store),
) -> InstallmentBalance:
    try:
        return await settlement.installment_balance(store, student_id, ordinal)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}/paid",
    response_model=AmountPaidResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_amount_paid(
    student_id: str,
    type: Optional[str] = Query(None, description="Restrict to one payment type"),
    store: RecordStore = Depends(get_store),
) -> AmountPaidResponse:
    amount = await settlement.amount_paid(store, student_id, type)
    return AmountPaidResponse(student_id=student_id, type=type, amount=amount)


@router.delete(
    "/student/{student_id}/zero-amount",
    response_model=CleanupResult,
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)
async def delete_zero_amount_payments(
    student_id: str,
    store: RecordStore = Depends(get_store),
) -> CleanupResult:
    try:
        deleted = await service.delete_zero_amount_payments(store, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return CleanupResult(student_id=student_id, deleted=deleted)


@router.get(
    "/outstanding",
    response_model=List[OutstandingBalance],
    dependencies=[Depends(get_current_user)],
)
async def list_outstanding_balances(
    class_id: Optional[str] = Query(None),
    store: RecordStore = Depends(get_store),
) -> List[OutstandingBalance]:
    """Students with unpaid installments, for printing convocations."""
    return await settlement.list_outstanding_balances(store, class_id=class_id)


@router.get(
    "",
    response_model=List[PaymentResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_payments(
    type: Optional[str] = Query(None),
    receipt_number: Optional[str] = Query(None),
    store: RecordStore = Depends(get_store),
) -> List[PaymentResponse]:
    return await service.list_payments(store, payment_type=type, receipt_number=receipt_number)


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_payment(
    payment_id: str,
    store: RecordStore = Depends(get_store),
) -> PaymentResponse:
    obj = await service.get_payment(store, payment_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return obj
