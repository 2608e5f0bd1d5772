"""School settings: a single record holding the school identity and the active school year."""

from typing import Any, Dict, Optional

from scolarite.core.config import settings
from scolarite.db.store import SCHOOL, RecordStore

from .schemas import SchoolSettingsResponse, SchoolSettingsUpdate


async def _get_school_record(store: RecordStore) -> Optional[Dict[str, Any]]:
    records = await store.get_all(SCHOOL)
    return records[0] if records else None


def _to_response(rec: Optional[Dict[str, Any]]) -> SchoolSettingsResponse:
    if not rec:
        return SchoolSettingsResponse(active_school_year=settings.active_school_year)
    return SchoolSettingsResponse(
        id=rec.get("id"),
        name=rec.get("name") or "",
        address=rec.get("address"),
        phone=rec.get("phone"),
        email=rec.get("email"),
        active_school_year=rec.get("active_school_year") or settings.active_school_year,
        currency=rec.get("currency") or "FCFA",
        updated_at=rec.get("updated_at"),
    )


async def get_school_settings(store: RecordStore) -> SchoolSettingsResponse:
    return _to_response(await _get_school_record(store))


async def update_school_settings(
    store: RecordStore, payload: SchoolSettingsUpdate
) -> SchoolSettingsResponse:
    data = payload.model_dump(exclude_unset=True)
    rec = await _get_school_record(store)
    if rec:
        rec = await store.update(SCHOOL, rec["id"], data)
    else:
        rec = await store.create(SCHOOL, data)
    await store.commit()
    return _to_response(rec)


async def get_active_school_year(store: RecordStore) -> Optional[str]:
    """Process-wide active school year: school record first, then ACTIVE_SCHOOL_YEAR."""
    rec = await _get_school_record(store)
    if rec and rec.get("active_school_year"):
        return rec["active_school_year"]
    return settings.active_school_year
