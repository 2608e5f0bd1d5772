"""Backup: export, import and reset of the whole record store."""

import logging
from datetime import datetime, timezone
from typing import Optional

from scolarite.api.v1.history.service import log_history
from scolarite.core.enums import HistoryType
from scolarite.core.exceptions import StoreWriteFailure
from scolarite.db.store import RecordStore

from .schemas import BackupImport, BackupImportResult, BackupSnapshot

logger = logging.getLogger(__name__)


async def export_backup(store: RecordStore) -> BackupSnapshot:
    return BackupSnapshot(
        exported_at=datetime.now(timezone.utc),
        collections=await store.export_data(),
    )


async def import_backup(
    store: RecordStore, payload: BackupImport, user: Optional[str] = None
) -> BackupImportResult:
    """Replace every collection present in the payload; others are left untouched."""
    try:
        written = await store.import_data(payload.collections)
        await log_history(
            store,
            HistoryType.AUTRE,
            target="Sauvegarde",
            description=f"Restauration de {written} enregistrement(s)",
            user=user,
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    logger.info("Imported %d record(s) into %s", written, ", ".join(payload.collections))
    return BackupImportResult(collections=sorted(payload.collections), records=written)


async def reset_data(store: RecordStore) -> None:
    try:
        await store.reset()
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    logger.warning("All records deleted")
