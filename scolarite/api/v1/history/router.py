"""History router: read-only journal of user actions."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from scolarite.auth.dependencies import get_current_user
from scolarite.core.enums import HistoryType
from scolarite.db.store import RecordStore, get_store

from .schemas import HistoryEntryResponse
from . import service

router = APIRouter(prefix="/api/v1/history", tags=["history"])


@router.get(
    "",
    response_model=List[HistoryEntryResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_history(
    type: Optional[HistoryType] = Query(None, description="Filter by action type"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    store: RecordStore = Depends(get_store),
) -> List[HistoryEntryResponse]:
    return await service.list_history(store, action_type=type, limit=limit)
