from typing import Any, Dict, List, Optional

from scolarite.db.store import CLASSES, RecordStore

from .schemas import ClassCreate, ClassResponse, ClassUpdate


def _class_to_response(c: Dict[str, Any]) -> ClassResponse:
    return ClassResponse(
        id=c["id"],
        level=c.get("level"),
        section=c.get("section") or "",
        school_year=c.get("school_year"),
        head_teacher=c.get("head_teacher"),
        max_size=c.get("max_size"),
        room=c.get("room"),
        created_at=c.get("created_at"),
        updated_at=c.get("updated_at"),
    )


async def create_class(store: RecordStore, payload: ClassCreate) -> ClassResponse:
    data = payload.model_dump(mode="json")
    data["section"] = data["section"].strip()
    data["school_year"] = data["school_year"].strip()
    obj = await store.create(CLASSES, data)
    await store.commit()
    return _class_to_response(obj)


async def list_classes(
    store: RecordStore,
    school_year: Optional[str] = None,
) -> List[ClassResponse]:
    rows = await store.get_all(CLASSES)
    if school_year:
        rows = [c for c in rows if c.get("school_year") == school_year]
    return [_class_to_response(c) for c in rows]


async def get_class(store: RecordStore, class_id: str) -> Optional[ClassResponse]:
    obj = await store.get_by_id(CLASSES, class_id)
    return _class_to_response(obj) if obj else None


async def update_class(
    store: RecordStore,
    class_id: str,
    payload: ClassUpdate,
) -> Optional[ClassResponse]:
    obj = await store.update(CLASSES, class_id, payload.model_dump(mode="json", exclude_unset=True))
    if not obj:
        return None
    await store.commit()
    return _class_to_response(obj)


async def delete_class(store: RecordStore, class_id: str) -> bool:
    deleted = await store.delete(CLASSES, class_id)
    if deleted:
        await store.commit()
    return deleted
