"""Fee schedule schemas."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from scolarite.core.enums import SchoolLevel


class InstallmentCreate(BaseModel):
    ordinal: int = Field(..., ge=1, description="Payment priority; 1 is the registration fee")
    label: Optional[str] = Field(None, max_length=100)
    due_date: date
    amount: int = Field(..., ge=0, description="Whole francs")


def _check_unique_ordinals(installments: Optional[List[InstallmentCreate]]) -> None:
    if not installments:
        return
    ordinals = [i.ordinal for i in installments]
    if len(ordinals) != len(set(ordinals)):
        raise ValueError("Installment ordinals must be unique within a fee schedule")


class FeeScheduleCreate(BaseModel):
    level: SchoolLevel
    school_year: str = Field(..., max_length=20, description="e.g. 2025-2026")
    installments: List[InstallmentCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_ordinals(self) -> "FeeScheduleCreate":
        _check_unique_ordinals(self.installments)
        return self


class FeeScheduleUpdate(BaseModel):
    level: Optional[SchoolLevel] = None
    school_year: Optional[str] = Field(None, max_length=20)
    installments: Optional[List[InstallmentCreate]] = None

    @model_validator(mode="after")
    def validate_ordinals(self) -> "FeeScheduleUpdate":
        _check_unique_ordinals(self.installments)
        return self


class Installment(BaseModel):
    ordinal: int
    label: Optional[str] = None
    due_date: Optional[str] = None
    amount: int


class FeeScheduleResponse(BaseModel):
    id: str
    level: str
    school_year: str
    installments: List[Installment]
    total: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def installment(self, ordinal: int) -> Optional[Installment]:
        for item in self.installments:
            if item.ordinal == ordinal:
                return item
        return None
