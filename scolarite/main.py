import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scolarite.api.v1.auth.router import router as auth_router
from scolarite.api.v1.backup.router import router as backup_router
from scolarite.api.v1.classes.router import router as classes_router
from scolarite.api.v1.fee_schedules.router import router as fee_schedules_router
from scolarite.api.v1.history.router import router as history_router
from scolarite.api.v1.payments.router import router as payments_router
from scolarite.api.v1.school.router import router as school_router
from scolarite.api.v1.students.router import router as students_router
from scolarite.auth.services import seed_default_admin
from scolarite.core.config import settings
from scolarite.core import models  # noqa: F401  registers tables on Base.metadata
from scolarite.db.session import AsyncSessionLocal, Base, engine
from scolarite.db.store import RecordStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        await seed_default_admin(RecordStore(session))
    logger.info("Database ready at %s", settings.database_url)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Scolarite Backend", lifespan=lifespan)

    # CORS: the desk front-end runs on another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(school_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(fee_schedules_router)
    app.include_router(payments_router)
    app.include_router(history_router)
    app.include_router(backup_router)

    return app


app = create_app()
