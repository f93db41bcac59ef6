from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from orgaccess.core.security import AuthenticatedUser, create_access_token
from orgaccess.db.session import build_engine, build_sessionmaker, get_db
from orgaccess.schemas.organization import OrganizationOut
from orgaccess.services.container import AccessServices

# Ensure Base + models are registered before create_all
from orgaccess.db.base import Base
import orgaccess.models  # noqa: F401


# ---------------------------------------------------------
# Engine + schema lifecycle (throwaway SQLite file per test)
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'orgaccess-test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture()
async def sessionmaker(engine):
    maker = build_sessionmaker(engine)

    # Catalog is static; every test starts with it in place
    async with maker() as session:
        services = AccessServices.from_session(session)
        async with services.uow:
            await services.catalog.seed()

    return maker


# ---------------------------------------------------------
# DB session + services for setup / assertions
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session
        await session.rollback()


@pytest.fixture()
def services(db) -> AccessServices:
    return AccessServices.from_session(db)


# ---------------------------------------------------------
# Callers
# ---------------------------------------------------------
def make_user(email: str | None = None, display_name: str | None = None) -> AuthenticatedUser:
    user_id = uuid.uuid4()
    return AuthenticatedUser(
        id=user_id,
        email=email or f"user-{user_id.hex[:8]}@example.com",
        display_name=display_name,
    )


def auth_headers(user: AuthenticatedUser) -> dict[str, str]:
    token = create_access_token(str(user.id), user.email, display_name=user.display_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def owner() -> AuthenticatedUser:
    return make_user("owner@example.com", "Olive Owner")


@pytest_asyncio.fixture()
async def org(services, owner) -> OrganizationOut:
    # Detached snapshot: ORM rows expire whenever a failing operation rolls back
    created = await services.organizations.create_organization("acme", "Acme Corp", owner)
    return OrganizationOut.model_validate(created)


# ---------------------------------------------------------
# FastAPI app + dependency override
# ---------------------------------------------------------
@pytest.fixture()
def app(sessionmaker):
    from orgaccess.main import app as fastapi_app

    async def _override_get_db():
        async with sessionmaker() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


# ---------------------------------------------------------
# HTTP client
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
    ) as ac:
        yield ac
