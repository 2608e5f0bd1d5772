from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from scolarite.main import app
from scolarite.auth.dependencies import get_current_user
from scolarite.auth.schemas import CurrentUser
from scolarite.core.enums import UserRole
from scolarite.db.session import Base, get_db
from scolarite.db.store import CLASSES, FEE_SCHEDULES, STUDENTS, RecordStore


TEST_DATABASE_URL = "sqlite+aiosqlite://"

# (ordinal, amount) of the schedule used by most allocation tests
BASIC_INSTALLMENTS = [(1, 35000), (2, 15000), (3, 10000)]


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; overrides the FastAPI dependency."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
def store(db_session: AsyncSession) -> RecordStore:
    return RecordStore(db_session)


@pytest.fixture()
def admin_user() -> CurrentUser:
    return CurrentUser(id="admin-1", name="M. DIREC", role=UserRole.ADMIN, email="directeur@ecole.local")


@pytest.fixture()
async def raw_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Client without an authenticated user; requests go through the real token check."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def client(raw_client: AsyncClient, admin_user: CurrentUser) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as an Admin."""
    app.dependency_overrides[get_current_user] = lambda: admin_user
    yield raw_client


@pytest.fixture()
def as_role():
    """Switch the authenticated user's role for the rest of the test."""

    def _set(role: UserRole) -> None:
        user = CurrentUser(id=f"user-{role.name.lower()}", name="Agent", role=role)
        app.dependency_overrides[get_current_user] = lambda: user

    return _set


@pytest.fixture()
def seed(store: RecordStore):
    """Factory writing a class, an optional fee schedule and a student, then committing."""

    async def _seed(
        installments: Optional[List[Tuple[int, int]]] = BASIC_INSTALLMENTS,
        level: str = "CM2",
        school_year: str = "2025-2026",
        with_class: bool = True,
        **student_fields: Any,
    ) -> Dict[str, Any]:
        class_id = None
        if with_class:
            school_class = await store.create(
                CLASSES, {"level": level, "section": "A", "school_year": school_year}
            )
            class_id = school_class["id"]
        if installments is not None:
            await store.create(
                FEE_SCHEDULES,
                {
                    "level": level,
                    "school_year": school_year,
                    "installments": [
                        {"ordinal": o, "label": f"Tranche {o}", "due_date": "2025-10-05", "amount": a}
                        for o, a in installments
                    ],
                },
            )
        student = await store.create(
            STUDENTS,
            {
                "matricule": student_fields.pop("matricule", "250001"),
                "last_name": "KOUASSI",
                "first_names": "Awa",
                "class_id": class_id,
                **student_fields,
            },
        )
        await store.commit()
        return student

    return _seed
