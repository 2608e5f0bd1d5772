from typing import Optional

from pydantic import BaseModel, Field

from scolarite.core.enums import EnrollmentStatus, StudentStatus


class StudentCreate(BaseModel):
    matricule: Optional[str] = Field(None, max_length=20, description="Generated when omitted")
    last_name: str = Field(..., min_length=1, max_length=100)
    first_names: str = Field("", max_length=200)
    sex: Optional[str] = Field(None, pattern="^[MF]$")
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    class_id: Optional[str] = None
    entry_year: Optional[str] = Field(None, description="e.g. 2025-2026")
    status: StudentStatus = StudentStatus.ACTIF
    enrollment_status: EnrollmentStatus = EnrollmentStatus.NON_INSCRIT
    father_guardian: Optional[str] = None
    mother_guardian: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class StudentUpdate(BaseModel):
    matricule: Optional[str] = Field(None, max_length=20)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    first_names: Optional[str] = Field(None, max_length=200)
    sex: Optional[str] = Field(None, pattern="^[MF]$")
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    class_id: Optional[str] = None
    entry_year: Optional[str] = None
    status: Optional[StudentStatus] = None
    father_guardian: Optional[str] = None
    mother_guardian: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class EnrollmentStatusUpdate(BaseModel):
    enrollment_status: EnrollmentStatus


class StudentResponse(BaseModel):
    id: str
    matricule: str
    last_name: str
    first_names: str = ""
    sex: Optional[str] = None
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    class_id: Optional[str] = None
    entry_year: Optional[str] = None
    status: str = StudentStatus.ACTIF.value
    enrollment_status: str = EnrollmentStatus.NON_INSCRIT.value
    father_guardian: Optional[str] = None
    mother_guardian: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
