"""
Payments service: automatic allocation across installments, manual override,
single-fee payments and zero-amount cleanup.

Allocation walks the student's installments by ascending ordinal, filling
each one's remaining balance before moving to the next; whatever is left
after the last installment is recorded as an untagged tuition payment (the
surplus, or "avance"). Payment records are append-only.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from scolarite.api.v1.fee_schedules.resolver import resolve_fee_schedule
from scolarite.api.v1.history.service import log_history
from scolarite.core.enums import HistoryType, PaymentMode
from scolarite.core.exceptions import InvalidAmount, NotFound, StoreWriteFailure
from scolarite.core.fee_kind import (
    REGISTRATION_ORDINAL,
    FeeKind,
    Registration,
    Tuition,
    kind_for_installment,
    kind_from_tags,
    kind_of,
    to_tags,
)
from scolarite.db.store import PAYMENTS, STUDENTS, RecordStore

from .receipts import generate_receipt_number
from .schemas import Allocation, AllocationResult, PaymentCreate, PaymentResponse
from .settlement import amount_paid_for_installment, list_student_payments, payment_amount

logger = logging.getLogger(__name__)

SURPLUS_SUFFIX = "SUR"


def _validate_amount(amount: Any) -> int:
    if isinstance(amount, bool):
        raise InvalidAmount()
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    if not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount()
    return amount


async def _require_student(store: RecordStore, student_id: str) -> Dict[str, Any]:
    student = await store.get_by_id(STUDENTS, student_id)
    if not student:
        raise NotFound("Student not found")
    return student


def _payment_date(value: Optional[datetime]) -> str:
    return (value or datetime.now(timezone.utc)).isoformat()


def payment_to_response(p: Dict[str, Any]) -> PaymentResponse:
    allocations = p.get("allocations")
    return PaymentResponse(
        id=p["id"],
        student_id=p.get("student_id") or "",
        amount=payment_amount(p),
        type=p.get("type") or "",
        installment_ordinal=p.get("installment_ordinal"),
        date=p.get("date"),
        receipt_number=p.get("receipt_number"),
        mode=p.get("mode"),
        note=p.get("note"),
        allocations=[Allocation(**a) for a in allocations] if allocations else None,
        surplus=p.get("surplus"),
        recorded_by=p.get("recorded_by"),
        created_at=p.get("created_at"),
        updated_at=p.get("updated_at"),
    )


async def _create_payment(
    store: RecordStore,
    student_id: str,
    amount: int,
    kind: FeeKind,
    paid_on: str,
    *,
    mode: PaymentMode,
    note: Optional[str],
    recorded_by: Optional[str],
    receipt_suffix: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "student_id": student_id,
        "amount": amount,
        **to_tags(kind),
        "date": paid_on,
        "receipt_number": generate_receipt_number(receipt_suffix),
        "mode": PaymentMode(mode).value,
        "note": note,
        "recorded_by": recorded_by,
    }
    if extra:
        data.update(extra)
    return await store.create(PAYMENTS, data)


async def _finish(
    store: RecordStore,
    student_id: str,
    amount: int,
    created: List[Dict[str, Any]],
    recorded_by: Optional[str],
) -> None:
    receipts = ", ".join(p["receipt_number"] for p in created)
    await log_history(
        store,
        HistoryType.PAIEMENT,
        target="Paiement",
        target_id=created[0]["id"] if created else None,
        description=f"Paiement de {amount} FCFA pour élève {student_id} (reçu {receipts})",
        user=recorded_by,
    )
    await store.commit()


async def allocate_payment(
    store: RecordStore,
    student_id: str,
    amount: Any,
    date: Optional[datetime] = None,
    *,
    mode: PaymentMode = PaymentMode.ESPECE,
    note: Optional[str] = None,
    recorded_by: Optional[str] = None,
) -> AllocationResult:
    """
    Split a payment across the student's outstanding installments.

    One record is written per installment touched (installment 1 as a
    registration, later ones as tuition tagged with their ordinal), plus one
    untagged tuition record for any surplus. Without a schedule the whole
    amount is recorded as a single untagged tuition payment.

    Raises InvalidAmount or NotFound before any write. A StoreWriteFailure
    rolls back every write of the call and propagates.
    """
    amount = _validate_amount(amount)
    await _require_student(store, student_id)
    paid_on = _payment_date(date)
    meta = {"mode": mode, "note": note, "recorded_by": recorded_by}

    schedule = await resolve_fee_schedule(store, student_id)

    try:
        if schedule is None or not schedule.installments:
            logger.warning("No fee schedule for student %s; recording %d as unallocated", student_id, amount)
            payment = await _create_payment(store, student_id, amount, Tuition(), paid_on, **meta)
            await _finish(store, student_id, amount, [payment], recorded_by)
            return AllocationResult(payments=[payment_to_response(payment)], allocations=[], surplus=0)

        # Balances are read before anything is written for this call
        to_allocate = amount
        allocations: List[Allocation] = []
        for installment in sorted(schedule.installments, key=lambda i: i.ordinal):
            if to_allocate == 0:
                break
            already = await amount_paid_for_installment(store, student_id, installment.ordinal)
            due = max(0, installment.amount - already)
            if due == 0:
                continue
            take = min(to_allocate, due)
            allocations.append(Allocation(installment_ordinal=installment.ordinal, amount=take))
            to_allocate -= take
        surplus = to_allocate
        split = {"allocations": [a.model_dump() for a in allocations]}

        created: List[Dict[str, Any]] = []
        for alloc in allocations:
            created.append(
                await _create_payment(
                    store,
                    student_id,
                    alloc.amount,
                    kind_for_installment(alloc.installment_ordinal),
                    paid_on,
                    receipt_suffix=str(alloc.installment_ordinal),
                    extra=split,
                    **meta,
                )
            )
        if surplus > 0:
            created.append(
                await _create_payment(
                    store,
                    student_id,
                    surplus,
                    Tuition(),
                    paid_on,
                    receipt_suffix=SURPLUS_SUFFIX,
                    extra={**split, "surplus": surplus},
                    **meta,
                )
            )
        await _finish(store, student_id, amount, created, recorded_by)
    except StoreWriteFailure:
        await store.rollback()
        raise

    logger.info(
        "Allocated %d for student %s: %d installment(s), surplus %d",
        amount,
        student_id,
        len(allocations),
        surplus,
    )
    return AllocationResult(
        payments=[payment_to_response(p) for p in created],
        allocations=allocations,
        surplus=surplus,
    )


async def record_single_payment(
    store: RecordStore,
    student_id: str,
    amount: Any,
    kind: FeeKind,
    date: Optional[datetime] = None,
    *,
    mode: PaymentMode = PaymentMode.ESPECE,
    note: Optional[str] = None,
    recorded_by: Optional[str] = None,
) -> AllocationResult:
    """
    Write one payment of the given kind for the full amount, without splitting.

    This is the manual override path: forcing an installment does not check
    whether it is already settled, so overpayment is accepted as-is.
    """
    amount = _validate_amount(amount)
    await _require_student(store, student_id)
    try:
        payment = await _create_payment(
            store,
            student_id,
            amount,
            kind,
            _payment_date(date),
            mode=mode,
            note=note,
            recorded_by=recorded_by,
        )
        await _finish(store, student_id, amount, [payment], recorded_by)
    except StoreWriteFailure:
        await store.rollback()
        raise

    allocations: List[Allocation] = []
    if isinstance(kind, Registration):
        allocations.append(Allocation(installment_ordinal=REGISTRATION_ORDINAL, amount=amount))
    elif isinstance(kind, Tuition) and kind.ordinal is not None:
        allocations.append(Allocation(installment_ordinal=kind.ordinal, amount=amount))
    logger.info("Recorded %s payment of %d for student %s", payment["type"], amount, student_id)
    return AllocationResult(payments=[payment_to_response(payment)], allocations=allocations, surplus=0)


async def record_manual_payment(
    store: RecordStore,
    student_id: str,
    amount: Any,
    ordinal: int,
    date: Optional[datetime] = None,
    **meta: Any,
) -> AllocationResult:
    """Force the whole amount onto one installment."""
    return await record_single_payment(
        store, student_id, amount, kind_for_installment(ordinal), date, **meta
    )


async def record_payment(
    store: RecordStore,
    student_id: str,
    payload: PaymentCreate,
    recorded_by: Optional[str] = None,
) -> AllocationResult:
    """Front-desk entry point: dispatch on the requested type and installment."""
    meta = {"mode": payload.mode, "note": payload.note, "recorded_by": recorded_by}
    kind = kind_from_tags(payload.type, payload.installment_ordinal)
    if isinstance(kind, Tuition) and kind.ordinal is None:
        return await allocate_payment(store, student_id, payload.amount, payload.date, **meta)
    if isinstance(kind, Tuition):
        return await record_manual_payment(store, student_id, payload.amount, kind.ordinal, payload.date, **meta)
    return await record_single_payment(store, student_id, payload.amount, kind, payload.date, **meta)


async def ensure_registration_payment(
    store: RecordStore,
    student_id: str,
    recorded_by: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Record the registration fee when a student becomes enrolled.

    Uses the amount of installment 1. Does nothing when that amount is not
    positive or a registration payment already exists; an existing
    zero-amount registration payment is filled in instead. Caller commits.
    """
    schedule = await resolve_fee_schedule(store, student_id)
    if schedule is None:
        return None
    installment = schedule.installment(REGISTRATION_ORDINAL)
    fee = installment.amount if installment else 0
    if fee <= 0:
        return None

    existing = [
        p for p in await list_student_payments(store, student_id)
        if isinstance(kind_of(p), Registration)
    ]
    if not existing:
        return await _create_payment(
            store,
            student_id,
            fee,
            Registration(),
            _payment_date(None),
            mode=PaymentMode.ESPECE,
            note=None,
            recorded_by=recorded_by,
        )
    if payment_amount(existing[0]) == 0:
        return await store.update(PAYMENTS, existing[0]["id"], {"amount": fee})
    return None


async def get_payment(store: RecordStore, payment_id: str) -> Optional[PaymentResponse]:
    p = await store.get_by_id(PAYMENTS, payment_id)
    return payment_to_response(p) if p else None


async def get_payment_history(store: RecordStore, student_id: str) -> List[PaymentResponse]:
    """Payments of one student, newest first."""
    await _require_student(store, student_id)
    payments = await list_student_payments(store, student_id)
    return [payment_to_response(p) for p in reversed(payments)]


async def list_payments(
    store: RecordStore,
    payment_type: Optional[str] = None,
    receipt_number: Optional[str] = None,
) -> List[PaymentResponse]:
    payments = await store.get_all(PAYMENTS)
    if payment_type:
        payments = [p for p in payments if p.get("type") == payment_type]
    if receipt_number:
        payments = [p for p in payments if p.get("receipt_number") == receipt_number]
    return [payment_to_response(p) for p in reversed(payments)]


async def delete_zero_amount_payments(store: RecordStore, student_id: str) -> int:
    """Administrative cleanup: delete the student's payments whose amount is 0."""
    zeros = [
        p for p in await list_student_payments(store, student_id)
        if payment_amount(p) == 0
    ]
    if not zeros:
        return 0
    try:
        for p in zeros:
            await store.delete(PAYMENTS, p["id"])
        await log_history(
            store,
            HistoryType.SUPPRESSION,
            target="Paiement",
            target_id=student_id,
            description=f"{len(zeros)} paiement(s) à 0 FCFA supprimé(s) pour élève {student_id}",
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    logger.info("Deleted %d zero-amount payment(s) for student %s", len(zeros), student_id)
    return len(zeros)
