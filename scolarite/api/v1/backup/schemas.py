from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BackupSnapshot(BaseModel):
    """Full store contents keyed by collection name. Records are passed through as-is."""

    exported_at: datetime
    collections: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)


class BackupImport(BaseModel):
    collections: Dict[str, List[Dict[str, Any]]]


class BackupImportResult(BaseModel):
    collections: List[str]
    records: int
