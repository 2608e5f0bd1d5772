"""
Students: CRUD over the students collection plus the enrollment switch.

Marking a student ``inscrit`` records the registration fee in the same
transaction as the status change.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from scolarite.api.v1.history.service import log_history
from scolarite.api.v1.payments.service import ensure_registration_payment
from scolarite.core.enums import EnrollmentStatus, HistoryType
from scolarite.core.exceptions import Conflict, NotFound, StoreWriteFailure
from scolarite.db.store import CLASSES, STUDENTS, RecordStore

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _student_to_response(s: Dict[str, Any]) -> StudentResponse:
    return StudentResponse(
        id=s["id"],
        matricule=s.get("matricule") or "",
        last_name=s.get("last_name") or "",
        first_names=s.get("first_names") or "",
        sex=s.get("sex"),
        birth_date=s.get("birth_date"),
        birth_place=s.get("birth_place"),
        class_id=s.get("class_id"),
        entry_year=s.get("entry_year"),
        status=s.get("status") or "Actif",
        enrollment_status=s.get("enrollment_status") or EnrollmentStatus.NON_INSCRIT.value,
        father_guardian=s.get("father_guardian"),
        mother_guardian=s.get("mother_guardian"),
        phone=s.get("phone"),
        address=s.get("address"),
        created_at=s.get("created_at"),
        updated_at=s.get("updated_at"),
    )


def _full_name(s: Dict[str, Any]) -> str:
    return f"{s.get('last_name', '')} {s.get('first_names', '')}".strip()


def generate_matricule(existing_count: int, now: Optional[datetime] = None) -> str:
    """Two-digit year followed by a four-digit sequence, e.g. 250042."""
    year = (now or datetime.now(timezone.utc)).strftime("%y")
    return f"{year}{existing_count + 1:04d}"


async def _ensure_unique_matricule(
    store: RecordStore, matricule: str, exclude_id: Optional[str] = None
) -> None:
    for s in await store.get_all(STUDENTS):
        if s.get("matricule") == matricule and s["id"] != exclude_id:
            raise Conflict(f"Matricule {matricule} is already used")


async def _ensure_class_exists(store: RecordStore, class_id: Optional[str]) -> None:
    if class_id and not await store.get_by_id(CLASSES, class_id):
        raise NotFound("Class not found")


async def create_student(
    store: RecordStore,
    payload: StudentCreate,
    recorded_by: Optional[str] = None,
) -> StudentResponse:
    data = payload.model_dump(mode="json")
    await _ensure_class_exists(store, data.get("class_id"))
    matricule = (data.get("matricule") or "").strip()
    if matricule:
        await _ensure_unique_matricule(store, matricule)
    else:
        matricule = generate_matricule(len(await store.get_all(STUDENTS)))
    data["matricule"] = matricule

    try:
        obj = await store.create(STUDENTS, data)
        if obj["enrollment_status"] == EnrollmentStatus.INSCRIT.value:
            await ensure_registration_payment(store, obj["id"], recorded_by)
        await log_history(
            store,
            HistoryType.CREATION,
            target="Élève",
            target_id=obj["id"],
            description=f"Ajout de l'élève {_full_name(obj)} ({matricule})",
            user=recorded_by,
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    logger.info("Created student %s (%s)", obj["id"], matricule)
    return _student_to_response(obj)


async def list_students(
    store: RecordStore,
    class_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[StudentResponse]:
    rows = await store.get_all(STUDENTS)
    if class_id:
        rows = [s for s in rows if s.get("class_id") == class_id]
    if search:
        term = search.strip().lower()
        rows = [
            s for s in rows
            if term in (s.get("matricule") or "").lower() or term in _full_name(s).lower()
        ]
    return [_student_to_response(s) for s in rows]


async def get_student(store: RecordStore, student_id: str) -> Optional[StudentResponse]:
    obj = await store.get_by_id(STUDENTS, student_id)
    return _student_to_response(obj) if obj else None


async def update_student(
    store: RecordStore,
    student_id: str,
    payload: StudentUpdate,
    recorded_by: Optional[str] = None,
) -> Optional[StudentResponse]:
    data = payload.model_dump(mode="json", exclude_unset=True)
    if not await store.get_by_id(STUDENTS, student_id):
        return None
    if "class_id" in data:
        await _ensure_class_exists(store, data["class_id"])
    if data.get("matricule"):
        await _ensure_unique_matricule(store, data["matricule"], exclude_id=student_id)

    try:
        obj = await store.update(STUDENTS, student_id, data)
        await log_history(
            store,
            HistoryType.MODIFICATION,
            target="Élève",
            target_id=student_id,
            description=f"Modification de l'élève {_full_name(obj)}",
            user=recorded_by,
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    return _student_to_response(obj)


async def set_enrollment_status(
    store: RecordStore,
    student_id: str,
    enrollment_status: EnrollmentStatus,
    recorded_by: Optional[str] = None,
) -> StudentResponse:
    """
    Switch a student between inscrit and non-inscrit.

    Becoming inscrit records the registration fee (installment 1) unless a
    registration payment already exists. Switching back never touches
    payments.
    """
    if not await store.get_by_id(STUDENTS, student_id):
        raise NotFound("Student not found")
    try:
        obj = await store.update(STUDENTS, student_id, {"enrollment_status": enrollment_status.value})
        if enrollment_status == EnrollmentStatus.INSCRIT:
            payment = await ensure_registration_payment(store, student_id, recorded_by)
            if payment:
                logger.info("Registration fee %s recorded for student %s", payment["amount"], student_id)
        await log_history(
            store,
            HistoryType.MODIFICATION,
            target="Élève",
            target_id=student_id,
            description=f"Statut d'inscription de {_full_name(obj)}: {enrollment_status.value}",
            user=recorded_by,
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    return _student_to_response(obj)


async def delete_student(
    store: RecordStore,
    student_id: str,
    recorded_by: Optional[str] = None,
) -> bool:
    obj = await store.get_by_id(STUDENTS, student_id)
    if not obj:
        return False
    try:
        await store.delete(STUDENTS, student_id)
        await log_history(
            store,
            HistoryType.SUPPRESSION,
            target="Élève",
            target_id=student_id,
            description=f"Suppression de l'élève {_full_name(obj)}",
            user=recorded_by,
        )
        await store.commit()
    except StoreWriteFailure:
        await store.rollback()
        raise
    return True
