from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from scolarite.auth.dependencies import get_current_user
from scolarite.auth.schemas import CurrentUser
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import EnrollmentStatusUpdate, StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentResponse:
    try:
        return await service.create_student(store, payload, recorded_by=current_user.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[StudentResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_students(
    class_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matricule or name"),
    store: RecordStore = Depends(get_store),
) -> List[StudentResponse]:
    return await service.list_students(store, class_id=class_id, search=search)


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_student(
    student_id: str,
    store: RecordStore = Depends(get_store),
) -> StudentResponse:
    obj = await service.get_student(store, student_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentResponse:
    try:
        obj = await service.update_student(store, student_id, payload, recorded_by=current_user.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.put("/{student_id}/enrollment", response_model=StudentResponse)
async def set_enrollment_status(
    student_id: str,
    payload: EnrollmentStatusUpdate,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentResponse:
    try:
        return await service.set_enrollment_status(
            store, student_id, payload.enrollment_status, recorded_by=current_user.name
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: str,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_student(store, student_id, recorded_by=current_user.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
