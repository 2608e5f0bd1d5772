from fastapi import APIRouter, Depends, HTTPException

from scolarite.auth.dependencies import get_current_user
from scolarite.auth.rbac import require_role
from scolarite.core.enums import UserRole
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import SchoolSettingsResponse, SchoolSettingsUpdate
from . import service

router = APIRouter(prefix="/api/v1/school", tags=["school"])


@router.get(
    "",
    response_model=SchoolSettingsResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_school_settings(
    store: RecordStore = Depends(get_store),
) -> SchoolSettingsResponse:
    return await service.get_school_settings(store)


@router.put(
    "",
    response_model=SchoolSettingsResponse,
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)
async def update_school_settings(
    payload: SchoolSettingsUpdate,
    store: RecordStore = Depends(get_store),
) -> SchoolSettingsResponse:
    try:
        return await service.update_school_settings(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
