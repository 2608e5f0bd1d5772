from typing import Optional

from pydantic import BaseModel, Field

from scolarite.core.enums import SchoolLevel


class ClassCreate(BaseModel):
    level: SchoolLevel
    section: str = Field("", max_length=20)
    school_year: str = Field(..., max_length=20, description="e.g. 2025-2026")
    head_teacher: Optional[str] = None
    max_size: int = Field(40, ge=1)
    room: Optional[str] = None


class ClassUpdate(BaseModel):
    level: Optional[SchoolLevel] = None
    section: Optional[str] = Field(None, max_length=20)
    school_year: Optional[str] = Field(None, max_length=20)
    head_teacher: Optional[str] = None
    max_size: Optional[int] = Field(None, ge=1)
    room: Optional[str] = None


class ClassResponse(BaseModel):
    id: str
    level: Optional[str] = None
    section: str = ""
    school_year: Optional[str] = None
    head_teacher: Optional[str] = None
    max_size: Optional[int] = None
    room: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
