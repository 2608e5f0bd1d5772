from typing import Optional

from pydantic import BaseModel

from scolarite.core.enums import HistoryType


class HistoryEntryResponse(BaseModel):
    id: str
    type: HistoryType
    target: str
    target_id: Optional[str] = None
    description: str
    user: Optional[str] = None
    date: str
