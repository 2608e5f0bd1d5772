from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from scolarite.auth.dependencies import get_current_user
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import ClassCreate, ClassResponse, ClassUpdate
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
async def create_class(
    payload: ClassCreate,
    store: RecordStore = Depends(get_store),
) -> ClassResponse:
    try:
        return await service.create_class(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[ClassResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_classes(
    school_year: Optional[str] = Query(None),
    store: RecordStore = Depends(get_store),
) -> List[ClassResponse]:
    return await service.list_classes(store, school_year=school_year)


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_class(
    class_id: str,
    store: RecordStore = Depends(get_store),
) -> ClassResponse:
    obj = await service.get_class(store, class_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.patch(
    "/{class_id}",
    response_model=ClassResponse,
    dependencies=[Depends(get_current_user)],
)
async def update_class(
    class_id: str,
    payload: ClassUpdate,
    store: RecordStore = Depends(get_store),
) -> ClassResponse:
    try:
        obj = await service.update_class(store, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.delete(
    "/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
async def delete_class(
    class_id: str,
    store: RecordStore = Depends(get_store),
) -> None:
    try:
        deleted = await service.delete_class(store, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
