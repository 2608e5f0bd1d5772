"""Generic record: one JSON document inside a named collection."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from scolarite.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(Base):
    """Key-value record store row. ``pk`` keeps insertion order for full-collection scans."""

    __tablename__ = "records"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))
    collection = Column(String(50), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
