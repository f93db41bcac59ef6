from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orgaccess.core.config import settings
from orgaccess.core.errors import OrgAccessError
from orgaccess.core.logging import configure_logging
from orgaccess.db.base import Base
from orgaccess.db.session import AsyncSessionLocal, engine
import orgaccess.models  # noqa: F401  # force model registration
from orgaccess.services.container import AccessServices

from orgaccess.api.v1.invitations import router as invitations_router
from orgaccess.api.v1.me import router as me_router
from orgaccess.api.v1.members import router as members_router
from orgaccess.api.v1.organizations import router as organizations_router
from orgaccess.api.v1.permissions import router as permissions_router
from orgaccess.api.v1.roles import router as roles_router

logger = structlog.get_logger(__name__)


async def prepare_database() -> None:
    """
    SQLite deployments get their schema created in place; Postgres is
    migrated with alembic. Either way the permission catalog is synced.
    """
    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        services = AccessServices.from_session(db)
        async with services.uow:
            await services.catalog.seed()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await prepare_database()
    logger.info("application_started", environment=settings.ENVIRONMENT)
    yield
    await engine.dispose()


async def handle_org_access_error(request: Request, exc: OrgAccessError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


def create_application() -> FastAPI:
    configure_logging()

    app = FastAPI(title="OrgAccess API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(OrgAccessError, handle_org_access_error)

    @app.get("/")
    def root():
        return {"status": "ok", "service": "orgaccess"}

    # Routers
    app.include_router(organizations_router, prefix="/api/v1")
    app.include_router(permissions_router, prefix="/api/v1")
    app.include_router(roles_router, prefix="/api/v1")
    app.include_router(members_router, prefix="/api/v1")
    app.include_router(invitations_router, prefix="/api/v1")
    app.include_router(me_router, prefix="/api/v1")

    return app


app = create_application()
