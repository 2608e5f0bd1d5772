import pytest

from scolarite.core.exceptions import StoreWriteFailure
from scolarite.db.store import CLASSES, PAYMENTS, STUDENTS, RecordStore


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(store: RecordStore) -> None:
    rec = await store.create(STUDENTS, {"last_name": "KONE", "id": "ignored"})
    assert rec["id"] != "ignored"
    assert rec["created_at"] is not None
    assert rec["updated_at"] is not None

    fetched = await store.get_by_id(STUDENTS, rec["id"])
    assert fetched["last_name"] == "KONE"
    # Collections are separate namespaces
    assert await store.get_by_id(CLASSES, rec["id"]) is None


@pytest.mark.asyncio
async def test_get_by_id_missing(store: RecordStore) -> None:
    assert await store.get_by_id(STUDENTS, "nope") is None
    assert await store.get_by_id(STUDENTS, None) is None
    assert await store.get_by_id(STUDENTS, "") is None


@pytest.mark.asyncio
async def test_get_all_in_insertion_order(store: RecordStore) -> None:
    for name in ("A", "B", "C"):
        await store.create(STUDENTS, {"last_name": name})
    await store.create(CLASSES, {"level": "CP1"})
    rows = await store.get_all(STUDENTS)
    assert [r["last_name"] for r in rows] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_update_merges_fields(store: RecordStore) -> None:
    rec = await store.create(STUDENTS, {"last_name": "KONE", "phone": "0102"})
    updated = await store.update(STUDENTS, rec["id"], {"phone": "0708", "address": "Abidjan"})
    assert updated["last_name"] == "KONE"
    assert updated["phone"] == "0708"
    assert updated["address"] == "Abidjan"
    assert updated["id"] == rec["id"]
    await store.commit()

    assert (await store.get_by_id(STUDENTS, rec["id"]))["phone"] == "0708"
    assert await store.update(STUDENTS, "missing", {"phone": "x"}) is None


@pytest.mark.asyncio
async def test_returned_records_are_copies(store: RecordStore) -> None:
    rec = await store.create(CLASSES, {"level": "CP1", "tags": ["a"]})
    rec["tags"].append("b")
    fetched = await store.get_by_id(CLASSES, rec["id"])
    assert fetched["tags"] == ["a"]


@pytest.mark.asyncio
async def test_delete(store: RecordStore) -> None:
    rec = await store.create(PAYMENTS, {"amount": 0})
    assert await store.delete(PAYMENTS, rec["id"]) is True
    assert await store.delete(PAYMENTS, rec["id"]) is False
    assert await store.get_all(PAYMENTS) == []


@pytest.mark.asyncio
async def test_rollback_discards_uncommitted_writes(store: RecordStore) -> None:
    await store.create(STUDENTS, {"last_name": "KEPT"})
    await store.commit()
    await store.create(STUDENTS, {"last_name": "DROPPED"})
    await store.rollback()
    assert [r["last_name"] for r in await store.get_all(STUDENTS)] == ["KEPT"]


@pytest.mark.asyncio
async def test_unserializable_data_raises_write_failure(store: RecordStore) -> None:
    with pytest.raises(StoreWriteFailure):
        await store.create(STUDENTS, {"last_name": object()})


@pytest.mark.asyncio
async def test_export_import_roundtrip(store: RecordStore) -> None:
    await store.create(STUDENTS, {"last_name": "OLD"})
    await store.create(CLASSES, {"level": "CE1"})
    await store.commit()

    snapshot = {
        "students": [
            {"id": "s-1", "last_name": "NEW", "created_at": "2025-09-01T08:00:00+00:00"},
            {"id": "s-2", "last_name": "OTHER"},
        ]
    }
    written = await store.import_data(snapshot)
    await store.commit()

    assert written == 2
    students = await store.get_all(STUDENTS)
    assert [s["id"] for s in students] == ["s-1", "s-2"]
    assert students[0]["last_name"] == "NEW"
    # Collections absent from the snapshot are untouched
    assert len(await store.get_all(CLASSES)) == 1

    exported = await store.export_data()
    assert set(exported) >= {"students", "classes", "payments", "fee_schedules"}
    assert [s["last_name"] for s in exported["students"]] == ["NEW", "OTHER"]


@pytest.mark.asyncio
async def test_reset_deletes_everything(store: RecordStore) -> None:
    await store.create(STUDENTS, {"last_name": "A"})
    await store.create(PAYMENTS, {"amount": 100})
    await store.commit()
    await store.reset()
    await store.commit()
    assert await store.get_all(STUDENTS) == []
    assert await store.get_all(PAYMENTS) == []
