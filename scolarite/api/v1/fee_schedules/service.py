"""Fee schedules: one schedule of installments per (level, school year)."""

import logging
from typing import Any, Dict, List, Optional

from scolarite.core.exceptions import Conflict
from scolarite.db.store import FEE_SCHEDULES, RecordStore

from .defaults import SCHOOL_LEVELS, default_installments
from .schemas import (
    FeeScheduleCreate,
    FeeScheduleResponse,
    FeeScheduleUpdate,
    Installment,
    InstallmentCreate,
)

logger = logging.getLogger(__name__)


def _to_int(val: Any) -> int:
    try:
        return int(val or 0)
    except (TypeError, ValueError):
        return 0


def normalize_installments(raw: Optional[List[Dict[str, Any]]]) -> List[Installment]:
    """Stored installments sorted by ordinal. A legacy entry without ordinal takes its position."""
    items = []
    for idx, e in enumerate(raw or []):
        ordinal = _to_int(e.get("ordinal")) or idx + 1
        items.append(
            Installment(
                ordinal=ordinal,
                label=e.get("label"),
                due_date=e.get("due_date"),
                amount=max(0, _to_int(e.get("amount"))),
            )
        )
    items.sort(key=lambda i: i.ordinal)
    return items


def schedule_to_response(rec: Dict[str, Any]) -> FeeScheduleResponse:
    installments = normalize_installments(rec.get("installments"))
    return FeeScheduleResponse(
        id=rec["id"],
        level=rec.get("level") or "",
        school_year=rec.get("school_year") or "",
        installments=installments,
        # A stored "total" is a stale cache; always derive it
        total=sum(i.amount for i in installments),
        created_at=rec.get("created_at"),
        updated_at=rec.get("updated_at"),
    )


def _dump_installments(installments: List[InstallmentCreate]) -> List[Dict[str, Any]]:
    ordered = sorted(installments, key=lambda i: i.ordinal)
    return [i.model_dump(mode="json") for i in ordered]


async def find_fee_schedule(
    store: RecordStore, level: str, school_year: str
) -> Optional[Dict[str, Any]]:
    """Exact (level, school_year) match, no fuzzy matching."""
    for rec in await store.get_all(FEE_SCHEDULES):
        if rec.get("level") == level and rec.get("school_year") == school_year:
            return rec
    return None


async def _ensure_unique(
    store: RecordStore, level: str, school_year: str, exclude_id: Optional[str] = None
) -> None:
    existing = await find_fee_schedule(store, level, school_year)
    if existing and existing["id"] != exclude_id:
        raise Conflict(f"A fee schedule already exists for {level} in {school_year}")


async def create_fee_schedule(store: RecordStore, payload: FeeScheduleCreate) -> FeeScheduleResponse:
    level = payload.level.value
    school_year = payload.school_year.strip()
    await _ensure_unique(store, level, school_year)
    rec = await store.create(
        FEE_SCHEDULES,
        {
            "level": level,
            "school_year": school_year,
            "installments": _dump_installments(payload.installments),
        },
    )
    await store.commit()
    logger.info("Created fee schedule for %s %s", level, school_year)
    return schedule_to_response(rec)


async def list_fee_schedules(
    store: RecordStore,
    level: Optional[str] = None,
    school_year: Optional[str] = None,
) -> List[FeeScheduleResponse]:
    rows = await store.get_all(FEE_SCHEDULES)
    if level:
        rows = [r for r in rows if r.get("level") == level]
    if school_year:
        rows = [r for r in rows if r.get("school_year") == school_year]
    return [schedule_to_response(r) for r in rows]


async def get_fee_schedule(store: RecordStore, schedule_id: str) -> Optional[FeeScheduleResponse]:
    rec = await store.get_by_id(FEE_SCHEDULES, schedule_id)
    return schedule_to_response(rec) if rec else None


async def update_fee_schedule(
    store: RecordStore, schedule_id: str, payload: FeeScheduleUpdate
) -> Optional[FeeScheduleResponse]:
    """Installments are replaced wholesale. Recorded payments are never touched."""
    rec = await store.get_by_id(FEE_SCHEDULES, schedule_id)
    if not rec:
        return None
    changes: Dict[str, Any] = {}
    if payload.level is not None:
        changes["level"] = payload.level.value
    if payload.school_year is not None:
        changes["school_year"] = payload.school_year.strip()
    if payload.installments is not None:
        changes["installments"] = _dump_installments(payload.installments)
    await _ensure_unique(
        store,
        changes.get("level", rec.get("level")),
        changes.get("school_year", rec.get("school_year")),
        exclude_id=schedule_id,
    )
    rec = await store.update(FEE_SCHEDULES, schedule_id, changes)
    await store.commit()
    return schedule_to_response(rec)


async def delete_fee_schedule(store: RecordStore, schedule_id: str) -> bool:
    deleted = await store.delete(FEE_SCHEDULES, schedule_id)
    if deleted:
        await store.commit()
    return deleted


async def ensure_default_fee_schedules(store: RecordStore, school_year: str) -> int:
    """Create the default schedule for every level that has none for this year."""
    school_year = school_year.strip()
    created = 0
    for level in SCHOOL_LEVELS:
        if await find_fee_schedule(store, level, school_year):
            continue
        await store.create(
            FEE_SCHEDULES,
            {
                "level": level,
                "school_year": school_year,
                "installments": default_installments(level, school_year),
            },
        )
        created += 1
    if created:
        await store.commit()
        logger.info("Created %d default fee schedules for %s", created, school_year)
    return created
