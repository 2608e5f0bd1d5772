"""Fee schedules router: configuration of installments per level and school year."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from scolarite.auth.dependencies import get_current_user
from scolarite.core.enums import SchoolLevel
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import FeeScheduleCreate, FeeScheduleResponse, FeeScheduleUpdate
from . import service

router = APIRouter(prefix="/api/v1/fee-schedules", tags=["fee-schedules"])


class DefaultSchedulesResult(BaseModel):
    school_year: str
    created: int


@router.post(
    "",
    response_model=FeeScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
async def create_fee_schedule(
    payload: FeeScheduleCreate,
    store: RecordStore = Depends(get_store),
) -> FeeScheduleResponse:
    try:
        return await service.create_fee_schedule(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/defaults",
    response_model=DefaultSchedulesResult,
    dependencies=[Depends(get_current_user)],
)
async def create_default_fee_schedules(
    school_year: str = Query(..., description="e.g. 2025-2026"),
    store: RecordStore = Depends(get_store),
) -> DefaultSchedulesResult:
    try:
        created = await service.ensure_default_fee_schedules(store, school_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return DefaultSchedulesResult(school_year=school_year.strip(), created=created)


@router.get(
    "",
    response_model=List[FeeScheduleResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_fee_schedules(
    level: Optional[SchoolLevel] = Query(None),
    school_year: Optional[str] = Query(None),
    store: RecordStore = Depends(get_store),
) -> List[FeeScheduleResponse]:
    return await service.list_fee_schedules(
        store,
        level=level.value if level else None,
        school_year=school_year,
    )


@router.get(
    "/{schedule_id}",
    response_model=FeeScheduleResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_fee_schedule(
    schedule_id: str,
    store: RecordStore = Depends(get_store),
) -> FeeScheduleResponse:
    obj = await service.get_fee_schedule(store, schedule_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee schedule not found")
    return obj


@router.put(
    "/{schedule_id}",
    response_model=FeeScheduleResponse,
    dependencies=[Depends(get_current_user)],
)
async def update_fee_schedule(
    schedule_id: str,
    payload: FeeScheduleUpdate,
    store: RecordStore = Depends(get_store),
) -> FeeScheduleResponse:
    try:
        obj = await service.update_fee_schedule(store, schedule_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee schedule not found")
    return obj


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
async def delete_fee_schedule(
    schedule_id: str,
    store: RecordStore = Depends(get_store),
) -> None:
    try:
        deleted = await service.delete_fee_schedule(store, schedule_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee schedule not found")
