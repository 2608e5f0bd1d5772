from datetime import datetime

import pytest
from httpx import AsyncClient

from scolarite.api.v1.students import service
from scolarite.api.v1.students.schemas import StudentCreate, StudentUpdate
from scolarite.core.enums import EnrollmentStatus
from scolarite.core.exceptions import Conflict, NotFound
from scolarite.db.store import CLASSES, FEE_SCHEDULES, PAYMENTS, RecordStore


def test_generate_matricule() -> None:
    assert service.generate_matricule(0, now=datetime(2025, 9, 1)) == "250001"
    assert service.generate_matricule(41, now=datetime(2026, 1, 5)) == "260042"


@pytest.mark.asyncio
async def test_create_student_generates_matricule(store: RecordStore) -> None:
    first = await service.create_student(store, StudentCreate(last_name="KONE"))
    second = await service.create_student(store, StudentCreate(last_name="TRAORE"))
    assert first.matricule.endswith("0001")
    assert second.matricule.endswith("0002")
    assert len(second.matricule) == 6


@pytest.mark.asyncio
async def test_create_student_rejects_used_matricule(store: RecordStore) -> None:
    await service.create_student(store, StudentCreate(last_name="KONE", matricule="250010"))
    with pytest.raises(Conflict):
        await service.create_student(store, StudentCreate(last_name="TRAORE", matricule="250010"))


@pytest.mark.asyncio
async def test_create_student_in_unknown_class(store: RecordStore) -> None:
    with pytest.raises(NotFound):
        await service.create_student(store, StudentCreate(last_name="KONE", class_id="missing"))


@pytest.mark.asyncio
async def test_update_and_search(store: RecordStore) -> None:
    student = await service.create_student(store, StudentCreate(last_name="KONE", first_names="Ali"))
    updated = await service.update_student(store, student.id, StudentUpdate(phone="0707070707"))
    assert updated.phone == "0707070707"
    assert updated.last_name == "KONE"

    found = await service.list_students(store, search="kone ali")
    assert [s.id for s in found] == [student.id]
    assert await service.list_students(store, search="zzz") == []
    assert await service.update_student(store, "missing", StudentUpdate(phone="1")) is None


async def _class_with_default_schedule(store: RecordStore, level: str = "CM2") -> str:
    school_class = await store.create(CLASSES, {"level": level, "school_year": "2025-2026"})
    await store.create(
        FEE_SCHEDULES,
        {
            "level": level,
            "school_year": "2025-2026",
            "installments": [
                {"ordinal": 1, "due_date": "2025-09-01", "amount": 45000},
                {"ordinal": 2, "due_date": "2025-10-05", "amount": 20000},
            ],
        },
    )
    await store.commit()
    return school_class["id"]


@pytest.mark.asyncio
async def test_enrolling_records_registration_fee(store: RecordStore) -> None:
    class_id = await _class_with_default_schedule(store)
    student = await service.create_student(store, StudentCreate(last_name="KONE", class_id=class_id))
    assert await store.get_all(PAYMENTS) == []

    enrolled = await service.set_enrollment_status(store, student.id, EnrollmentStatus.INSCRIT)
    assert enrolled.enrollment_status == "inscrit"

    payments = await store.get_all(PAYMENTS)
    assert len(payments) == 1
    assert payments[0]["type"] == "inscription"
    assert payments[0]["amount"] == 45000

    # Enrolling again does not duplicate the fee
    await service.set_enrollment_status(store, student.id, EnrollmentStatus.NON_INSCRIT)
    await service.set_enrollment_status(store, student.id, EnrollmentStatus.INSCRIT)
    assert len(await store.get_all(PAYMENTS)) == 1


@pytest.mark.asyncio
async def test_enrolling_fills_zero_amount_registration(store: RecordStore) -> None:
    class_id = await _class_with_default_schedule(store)
    student = await service.create_student(store, StudentCreate(last_name="KONE", class_id=class_id))
    await store.create(PAYMENTS, {"student_id": student.id, "amount": 0, "type": "inscription"})
    await store.commit()

    await service.set_enrollment_status(store, student.id, EnrollmentStatus.INSCRIT)

    payments = await store.get_all(PAYMENTS)
    assert len(payments) == 1
    assert payments[0]["amount"] == 45000


@pytest.mark.asyncio
async def test_enrolling_without_schedule_records_nothing(store: RecordStore) -> None:
    student = await service.create_student(store, StudentCreate(last_name="KONE"))
    enrolled = await service.set_enrollment_status(store, student.id, EnrollmentStatus.INSCRIT)
    assert enrolled.enrollment_status == "inscrit"
    assert await store.get_all(PAYMENTS) == []


@pytest.mark.asyncio
async def test_create_enrolled_student_records_registration_fee(store: RecordStore) -> None:
    class_id = await _class_with_default_schedule(store)
    await service.create_student(
        store,
        StudentCreate(last_name="KONE", class_id=class_id, enrollment_status=EnrollmentStatus.INSCRIT),
    )
    payments = await store.get_all(PAYMENTS)
    assert [(p["type"], p["amount"]) for p in payments] == [("inscription", 45000)]


@pytest.mark.asyncio
async def test_set_enrollment_status_unknown_student(store: RecordStore) -> None:
    with pytest.raises(NotFound):
        await service.set_enrollment_status(store, "missing", EnrollmentStatus.INSCRIT)


@pytest.mark.asyncio
async def test_students_api(client: AsyncClient) -> None:
    klass = await client.post(
        "/api/v1/classes", json={"level": "CP1", "section": "B", "school_year": "2025-2026"}
    )
    assert klass.status_code == 201
    class_id = klass.json()["id"]

    created = await client.post(
        "/api/v1/students",
        json={"last_name": "KONE", "first_names": "Ali", "sex": "M", "class_id": class_id},
    )
    assert created.status_code == 201
    student = created.json()
    assert student["status"] == "Actif"
    assert student["enrollment_status"] == "non-inscrit"

    listed = await client.get("/api/v1/students", params={"class_id": class_id})
    assert [s["id"] for s in listed.json()] == [student["id"]]

    enrolled = await client.put(
        f"/api/v1/students/{student['id']}/enrollment", json={"enrollment_status": "inscrit"}
    )
    assert enrolled.status_code == 200
    assert enrolled.json()["enrollment_status"] == "inscrit"

    bad_sex = await client.post("/api/v1/students", json={"last_name": "X", "sex": "Z"})
    assert bad_sex.status_code == 422

    deleted = await client.delete(f"/api/v1/students/{student['id']}")
    assert deleted.status_code == 204
    assert (await client.get(f"/api/v1/students/{student['id']}")).status_code == 404
