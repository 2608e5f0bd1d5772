"""
Record store: generic collections of JSON records over one SQLAlchemy table.

Writes are flushed into the caller's session and only become durable on
``commit()``; a service that performs several writes commits once so the
whole call is all-or-nothing. Any persistence error surfaces as
``StoreWriteFailure``.
"""

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Depends
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scolarite.core.exceptions import StoreWriteFailure
from scolarite.core.models import Record
from scolarite.db.session import get_db

logger = logging.getLogger(__name__)

STUDENTS = "students"
CLASSES = "classes"
FEE_SCHEDULES = "fee_schedules"
PAYMENTS = "payments"
SCHOOL = "school"
USERS = "users"
HISTORY = "history"

COLLECTIONS = (STUDENTS, CLASSES, FEE_SCHEDULES, PAYMENTS, SCHOOL, USERS, HISTORY)

_RESERVED_KEYS = ("id", "created_at", "updated_at")


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: copy.deepcopy(v) for k, v in data.items() if k not in _RESERVED_KEYS}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _to_dict(rec: Record) -> Dict[str, Any]:
    out = copy.deepcopy(rec.data or {})
    out["id"] = rec.id
    out["created_at"] = _iso(rec.created_at)
    out["updated_at"] = _iso(rec.updated_at)
    return out


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now(timezone.utc)


class RecordStore:
    """Create/read/update/delete/list over named collections."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_record(self, collection: str, record_id: str) -> Optional[Record]:
        result = await self.db.execute(
            select(Record).where(Record.collection == collection, Record.id == str(record_id))
        )
        return result.scalar_one_or_none()

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error("Record store flush failed: %s", e)
            raise StoreWriteFailure() from e

    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(Record).where(Record.collection == collection).order_by(Record.pk)
        )
        return [_to_dict(r) for r in result.scalars().all()]

    async def get_by_id(self, collection: str, record_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not record_id:
            return None
        rec = await self._get_record(collection, record_id)
        return _to_dict(rec) if rec else None

    async def create(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        rec = Record(
            id=str(uuid.uuid4()),
            collection=collection,
            data=_clean(data),
            created_at=now,
            updated_at=now,
        )
        self.db.add(rec)
        await self._flush()
        return _to_dict(rec)

    async def update(
        self, collection: str, record_id: str, partial: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        rec = await self._get_record(collection, record_id)
        if not rec:
            return None
        # Reassign so the JSON column is marked dirty
        rec.data = {**(rec.data or {}), **_clean(partial)}
        rec.updated_at = datetime.now(timezone.utc)
        await self._flush()
        return _to_dict(rec)

    async def delete(self, collection: str, record_id: str) -> bool:
        rec = await self._get_record(collection, record_id)
        if not rec:
            return False
        await self.db.delete(rec)
        await self._flush()
        return True

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Record store commit failed: %s", e)
            raise StoreWriteFailure() from e

    async def rollback(self) -> None:
        await self.db.rollback()

    # --- Backup ---
    async def export_data(self, collections: Iterable[str] = COLLECTIONS) -> Dict[str, List[Dict[str, Any]]]:
        return {name: await self.get_all(name) for name in collections}

    async def import_data(self, snapshot: Dict[str, List[Dict[str, Any]]]) -> int:
        """Replace every collection named in the snapshot. Returns the number of records written."""
        written = 0
        for collection, items in snapshot.items():
            await self._execute_write(sa_delete(Record).where(Record.collection == collection))
            for item in items or []:
                created = _parse_timestamp(item.get("created_at"))
                self.db.add(
                    Record(
                        id=str(item.get("id") or uuid.uuid4()),
                        collection=collection,
                        data=_clean(item),
                        created_at=created,
                        updated_at=_parse_timestamp(item.get("updated_at") or item.get("created_at")),
                    )
                )
                written += 1
        await self._flush()
        return written

    async def reset(self) -> None:
        await self._execute_write(sa_delete(Record))

    async def _execute_write(self, stmt) -> None:
        try:
            await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreWriteFailure() from e


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)
