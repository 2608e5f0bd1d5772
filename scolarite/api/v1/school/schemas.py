from typing import Optional

from pydantic import BaseModel, Field


class SchoolSettingsUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    active_school_year: Optional[str] = Field(None, description="e.g. 2025-2026")
    currency: Optional[str] = Field(None, max_length=10)


class SchoolSettingsResponse(BaseModel):
    id: Optional[str] = None
    name: str = ""
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    active_school_year: Optional[str] = None
    currency: str = "FCFA"
    updated_at: Optional[str] = None
