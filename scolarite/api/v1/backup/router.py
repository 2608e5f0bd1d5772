from fastapi import APIRouter, Depends, HTTPException, status

from scolarite.auth.rbac import require_role
from scolarite.auth.schemas import CurrentUser
from scolarite.core.enums import UserRole
from scolarite.core.exceptions import ServiceError
from scolarite.db.store import RecordStore, get_store

from .schemas import BackupImport, BackupImportResult, BackupSnapshot
from . import service

router = APIRouter(prefix="/api/v1/backup", tags=["backup"])


@router.get(
    "/export",
    response_model=BackupSnapshot,
    dependencies=[Depends(require_role(UserRole.ADMIN, UserRole.SECRETAIRE))],
)
async def export_backup(store: RecordStore = Depends(get_store)) -> BackupSnapshot:
    return await service.export_backup(store)


@router.post("/import", response_model=BackupImportResult)
async def import_backup(
    payload: BackupImport,
    store: RecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
) -> BackupImportResult:
    try:
        return await service.import_backup(store, payload, user=current_user.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)
async def reset_data(store: RecordStore = Depends(get_store)) -> None:
    try:
        await service.reset_data(store)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
