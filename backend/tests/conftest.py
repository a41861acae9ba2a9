"""Test fixtures for the PawScript backend."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from pawscript.core.config import get_settings
from pawscript.core.security import get_password_hash
from pawscript.db.base import Base
from pawscript.db.session import dispose_engine, get_sessionmaker
from pawscript.main import app
from pawscript.models import Clinic, User, UserRole, UserStatus


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus a seeded clinic, vet and front-desk user."""
    sessionmaker = get_sessionmaker(db_url)
    vet_password = "Passw0rd!"
    staff_password = "Fr0ntDesk!"

    async with sessionmaker() as session:
        clinic = Clinic(name="Cedar Valley Vets", slug=f"cedar-{uuid.uuid4().hex[:8]}")
        session.add(clinic)
        await session.flush()

        vet = User(
            clinic_id=clinic.id,
            email="vet@example.com",
            hashed_password=get_password_hash(vet_password),
            first_name="Dana",
            last_name="Vet",
            role=UserRole.VETERINARIAN,
            status=UserStatus.ACTIVE,
        )
        staff = User(
            clinic_id=clinic.id,
            email="desk@example.com",
            hashed_password=get_password_hash(staff_password),
            first_name="Riley",
            last_name="Desk",
            role=UserRole.STAFF,
            status=UserStatus.ACTIVE,
        )
        session.add_all([vet, staff])
        await session.commit()

        context: dict[str, object] = {
            "clinic_id": clinic.id,
            "vet_id": vet.id,
            "vet_email": vet.email,
            "vet_password": vet_password,
            "staff_email": staff.email,
            "staff_password": staff_password,
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
