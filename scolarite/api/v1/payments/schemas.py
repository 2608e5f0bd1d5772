"""Payment schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from scolarite.core.enums import InstallmentStatus, PaymentMode, PaymentType


class PaymentCreate(BaseModel):
    # Left untyped: the service rejects anything but a positive whole number with InvalidAmount
    amount: Any = Field(..., description="Whole francs")
    type: str = Field(PaymentType.SCOLARITE.value, description="inscription, scolarite, cantine...")
    installment_ordinal: Optional[int] = Field(
        None, ge=1, description="Force a single installment; omit for automatic allocation"
    )
    mode: PaymentMode = PaymentMode.ESPECE
    date: Optional[datetime] = None
    note: Optional[str] = Field(None, max_length=500)


class Allocation(BaseModel):
    installment_ordinal: int
    amount: int


class PaymentResponse(BaseModel):
    id: str
    student_id: str
    amount: int
    type: str
    installment_ordinal: Optional[int] = None
    date: Optional[str] = None
    receipt_number: Optional[str] = None
    mode: Optional[str] = None
    note: Optional[str] = None
    allocations: Optional[List[Allocation]] = None
    surplus: Optional[int] = None
    recorded_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AllocationResult(BaseModel):
    payments: List[PaymentResponse]
    allocations: List[Allocation]
    surplus: int = 0


class InstallmentLine(BaseModel):
    ordinal: int
    label: Optional[str] = None
    due_date: Optional[str] = None
    expected: int
    paid: int
    remaining: int
    status: InstallmentStatus


class InstallmentBalance(BaseModel):
    student_id: str
    ordinal: int
    expected: int
    paid: int
    remaining: int


class AmountPaidResponse(BaseModel):
    student_id: str
    type: Optional[str] = None
    amount: int


class StudentStatement(BaseModel):
    student_id: str
    schedule_id: Optional[str] = None
    level: Optional[str] = None
    school_year: Optional[str] = None
    lines: List[InstallmentLine] = Field(default_factory=list)
    total_expected: int = 0
    total_paid: int = 0
    paid_by_type: Dict[str, int] = Field(default_factory=dict)
    outstanding: int = 0
    status: InstallmentStatus


class CleanupResult(BaseModel):
    student_id: str
    deleted: int


class OutstandingInstallment(BaseModel):
    ordinal: int
    due_date: Optional[str] = None
    expected: int
    paid: int
    remaining: int


class OutstandingBalance(BaseModel):
    """One student still owing money on their fee schedule (a convocation line)."""

    student_id: str
    matricule: Optional[str] = None
    last_name: str = ""
    first_names: str = ""
    class_id: Optional[str] = None
    installments: List[OutstandingInstallment]
    total_due: int
