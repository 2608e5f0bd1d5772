"""
Closed set of payment kinds and their mapping to stored tags.

Stored payment records keep the free-form ``type`` string and an optional
``installment_ordinal``. Inside the service layer every record is read back
as one of Registration, Tuition or Other so the installment-1 rule lives in
exactly one place.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from scolarite.core.enums import PaymentType

REGISTRATION_ORDINAL = 1


@dataclass(frozen=True)
class Registration:
    """Registration fee. Always settles installment 1."""


@dataclass(frozen=True)
class Tuition:
    """Tuition payment, optionally tagged with the installment it settles."""

    ordinal: Optional[int] = None


@dataclass(frozen=True)
class Other:
    """Any other fee (cantine, transport...). Never settles an installment."""

    label: str


FeeKind = Union[Registration, Tuition, Other]


def kind_for_installment(ordinal: int) -> FeeKind:
    """Installment 1 is recorded as a registration, later ones as tagged tuition."""
    if ordinal == REGISTRATION_ORDINAL:
        return Registration()
    return Tuition(ordinal)


def kind_from_tags(payment_type: Optional[str], installment_ordinal: Any = None) -> FeeKind:
    label = (payment_type or "").strip()
    if label == PaymentType.INSCRIPTION.value:
        return Registration()
    if label == PaymentType.SCOLARITE.value or not label:
        return Tuition(_parse_ordinal(installment_ordinal))
    return Other(label)


def kind_of(record: Dict[str, Any]) -> FeeKind:
    return kind_from_tags(record.get("type"), record.get("installment_ordinal"))


def to_tags(kind: FeeKind) -> Dict[str, Any]:
    """Stored ``type`` / ``installment_ordinal`` fields for a kind."""
    if isinstance(kind, Registration):
        return {"type": PaymentType.INSCRIPTION.value, "installment_ordinal": None}
    if isinstance(kind, Tuition):
        return {"type": PaymentType.SCOLARITE.value, "installment_ordinal": kind.ordinal}
    if isinstance(kind, Other):
        return {"type": kind.label, "installment_ordinal": None}
    raise TypeError(f"Unknown fee kind: {kind!r}")


def settles_installment(kind: FeeKind, ordinal: int) -> bool:
    """True when a payment of this kind counts toward the given installment.

    Installment 1 unions registration payments with tuition tagged ordinal 1.
    Untagged tuition only counts toward the student's total.
    """
    if isinstance(kind, Registration):
        return ordinal == REGISTRATION_ORDINAL
    if isinstance(kind, Tuition):
        return kind.ordinal is not None and kind.ordinal == ordinal
    return False


def _parse_ordinal(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
