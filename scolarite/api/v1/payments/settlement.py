"""
Settlement queries: how much a student has paid, per type, per installment
and in total.

Nothing is cached. Every query rescans the payments collection so results
always reflect the stored history, including manual corrections.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from scolarite.api.v1.fee_schedules.resolver import resolve_fee_schedule
from scolarite.core.enums import InstallmentStatus
from scolarite.core.exceptions import NotFound
from scolarite.core.fee_kind import kind_of, settles_installment
from scolarite.db.store import PAYMENTS, STUDENTS, RecordStore

from .schemas import (
    InstallmentBalance,
    InstallmentLine,
    OutstandingBalance,
    OutstandingInstallment,
    StudentStatement,
)


def payment_amount(payment: Dict[str, Any]) -> int:
    try:
        return int(payment.get("amount") or 0)
    except (TypeError, ValueError):
        return 0


def sum_paid(payments: Iterable[Dict[str, Any]], payment_type: Optional[str] = None) -> int:
    return sum(
        payment_amount(p)
        for p in payments
        if payment_type is None or p.get("type") == payment_type
    )


def sum_paid_for_installment(payments: Iterable[Dict[str, Any]], ordinal: int) -> int:
    return sum(payment_amount(p) for p in payments if settles_installment(kind_of(p), ordinal))


def installment_status(expected: int, paid: int) -> InstallmentStatus:
    if max(0, expected - paid) == 0:
        return InstallmentStatus.paid
    if paid > 0:
        return InstallmentStatus.partial
    return InstallmentStatus.unpaid


async def list_student_payments(store: RecordStore, student_id: str) -> List[Dict[str, Any]]:
    """Payments of one student in insertion order."""
    return [p for p in await store.get_all(PAYMENTS) if p.get("student_id") == student_id]


async def amount_paid(store: RecordStore, student_id: str, payment_type: Optional[str] = None) -> int:
    """Total paid by the student, optionally restricted to one payment type tag."""
    return sum_paid(await list_student_payments(store, student_id), payment_type)


async def amount_paid_for_installment(store: RecordStore, student_id: str, ordinal: int) -> int:
    """
    Raw sum paid toward one installment. Not clamped to the expected amount.

    Installment 1 counts both registration payments and tuition tagged 1.
    Later installments only count tuition tagged with that exact ordinal.
    """
    return sum_paid_for_installment(await list_student_payments(store, student_id), ordinal)


async def installment_balance(store: RecordStore, student_id: str, ordinal: int) -> InstallmentBalance:
    """Expected, paid and remaining amounts for one installment of the student's schedule."""
    schedule = await resolve_fee_schedule(store, student_id)
    if schedule is None:
        raise NotFound("No fee schedule configured for this student")
    installment = schedule.installment(ordinal)
    if installment is None:
        raise NotFound(f"Installment {ordinal} not found in fee schedule")
    paid = await amount_paid_for_installment(store, student_id, ordinal)
    return InstallmentBalance(
        student_id=student_id,
        ordinal=ordinal,
        expected=installment.amount,
        paid=paid,
        remaining=max(0, installment.amount - paid),
    )


async def remaining(store: RecordStore, student_id: str, ordinal: int) -> int:
    """Amount still due on an installment, never negative."""
    return (await installment_balance(store, student_id, ordinal)).remaining


async def get_student_statement(store: RecordStore, student_id: str) -> StudentStatement:
    schedule = await resolve_fee_schedule(store, student_id)
    payments = await list_student_payments(store, student_id)

    paid_by_type: Dict[str, int] = defaultdict(int)
    for p in payments:
        paid_by_type[p.get("type") or ""] += payment_amount(p)
    total_paid = sum_paid(payments)

    lines: List[InstallmentLine] = []
    if schedule is not None:
        for inst in schedule.installments:
            paid = sum_paid_for_installment(payments, inst.ordinal)
            lines.append(
                InstallmentLine(
                    ordinal=inst.ordinal,
                    label=inst.label,
                    due_date=inst.due_date,
                    expected=inst.amount,
                    paid=paid,
                    remaining=max(0, inst.amount - paid),
                    status=installment_status(inst.amount, paid),
                )
            )
    outstanding = sum(line.remaining for line in lines)

    if schedule is not None and outstanding == 0:
        overall = InstallmentStatus.paid
    elif total_paid > 0:
        overall = InstallmentStatus.partial
    else:
        overall = InstallmentStatus.unpaid

    return StudentStatement(
        student_id=student_id,
        schedule_id=schedule.id if schedule else None,
        level=schedule.level if schedule else None,
        school_year=schedule.school_year if schedule else None,
        lines=lines,
        total_expected=schedule.total if schedule else 0,
        total_paid=total_paid,
        paid_by_type=dict(paid_by_type),
        outstanding=outstanding,
        status=overall,
    )


async def list_outstanding_balances(
    store: RecordStore, class_id: Optional[str] = None
) -> List[OutstandingBalance]:
    """
    Students who still owe money on their schedule, with the unpaid installments.

    Students without a schedule (or with an empty one) and students with
    nothing outstanding are left out. Optionally restricted to one class.
    """
    students = await store.get_all(STUDENTS)
    if class_id:
        students = [s for s in students if s.get("class_id") == class_id]

    by_student: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for p in await store.get_all(PAYMENTS):
        by_student[p.get("student_id")].append(p)

    balances: List[OutstandingBalance] = []
    for student in students:
        schedule = await resolve_fee_schedule(store, student["id"])
        if schedule is None or not schedule.installments:
            continue
        payments = by_student.get(student["id"], [])
        unpaid: List[OutstandingInstallment] = []
        for inst in schedule.installments:
            paid = sum_paid_for_installment(payments, inst.ordinal)
            left = max(0, inst.amount - paid)
            if left > 0:
                unpaid.append(
                    OutstandingInstallment(
                        ordinal=inst.ordinal,
                        due_date=inst.due_date,
                        expected=inst.amount,
                        paid=paid,
                        remaining=left,
                    )
                )
        if unpaid:
            balances.append(
                OutstandingBalance(
                    student_id=student["id"],
                    matricule=student.get("matricule"),
                    last_name=student.get("last_name") or "",
                    first_names=student.get("first_names") or "",
                    class_id=student.get("class_id"),
                    installments=unpaid,
                    total_due=sum(i.remaining for i in unpaid),
                )
            )
    return balances
