"""
Action history. Append one entry per business action; the caller commits
together with the action's own writes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from scolarite.core.enums import HistoryType
from scolarite.db.store import HISTORY, RecordStore

from .schemas import HistoryEntryResponse


async def log_history(
    store: RecordStore,
    action_type: HistoryType,
    *,
    target: str,
    description: str,
    target_id: Optional[str] = None,
    user: Optional[str] = None,
) -> Dict[str, Any]:
    return await store.create(
        HISTORY,
        {
            "type": action_type.value,
            "target": target,
            "target_id": target_id,
            "description": description,
            "user": user,
            "date": datetime.now(timezone.utc).isoformat(),
        },
    )


async def list_history(
    store: RecordStore,
    action_type: Optional[HistoryType] = None,
    limit: Optional[int] = None,
) -> List[HistoryEntryResponse]:
    entries = await store.get_all(HISTORY)
    if action_type is not None:
        entries = [e for e in entries if e.get("type") == action_type.value]
    entries.reverse()
    if limit is not None:
        entries = entries[:limit]
    return [
        HistoryEntryResponse(
            id=e["id"],
            type=e["type"],
            target=e.get("target") or "",
            target_id=e.get("target_id"),
            description=e.get("description") or "",
            user=e.get("user"),
            date=e.get("date") or e["created_at"],
        )
        for e in entries
    ]
