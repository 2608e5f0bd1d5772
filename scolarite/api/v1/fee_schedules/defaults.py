"""
Default fee schedules per school level.

Seven installments: registration in September, then six instalments on the
5th of each month from October to March.
"""

from datetime import date
from typing import Any, Dict, List

from scolarite.core.enums import SchoolLevel

SCHOOL_LEVELS = [level.value for level in SchoolLevel]

NURSERY_LEVELS = (
    SchoolLevel.PETITE_SECTION.value,
    SchoolLevel.MOYENNE_SECTION.value,
    SchoolLevel.GRANDE_SECTION.value,
)


def parse_start_year(school_year: str) -> int:
    """'2025-2026' -> 2025. Falls back to the current year."""
    try:
        return int(school_year.split("-")[0])
    except (ValueError, IndexError):
        return date.today().year


def default_installments(level: str, school_year: str) -> List[Dict[str, Any]]:
    start = parse_start_year(school_year)
    nxt = start + 1
    due_dates = [
        date(start, 9, 1),
        date(start, 10, 5),
        date(start, 11, 5),
        date(start, 12, 5),
        date(nxt, 1, 5),
        date(nxt, 2, 5),
        date(nxt, 3, 5),
    ]

    registration = 35000
    first = 15000
    second = 15000
    if level in (SchoolLevel.CM1.value, SchoolLevel.CM2.value):
        first = 20000
    if level == SchoolLevel.CM2.value:
        # includes the 10000 exam fee
        registration = 45000
    if level in NURSERY_LEVELS:
        second = 10000

    amounts = [registration, first, second, 10000, 10000, 10000, 10000]
    labels = ["Inscription"] + [f"Versement {n}" for n in range(1, 7)]
    return [
        {
            "ordinal": idx + 1,
            "label": labels[idx],
            "due_date": due_dates[idx].isoformat(),
            "amount": amounts[idx],
        }
        for idx in range(7)
    ]
