"""Vet login and token handling."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from pawscript.api import api_router
from pawscript.api.deps import DEFAULT_RATE_LIMIT, parse_rate
from pawscript.core.security import create_access_token
from pawscript.db.session import get_sessionmaker
from pawscript.models.audit_event import AuditEvent

pytestmark = pytest.mark.asyncio


async def _fetch_events(db_url: str, event_type: str) -> list[AuditEvent]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        result = await session.execute(
            select(AuditEvent).where(AuditEvent.event_type == event_type)
        )
        return list(result.scalars().all())


async def test_login_issues_token_and_audits(app_context: dict[str, Any], db_url: str) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    response = await client.post(
        "/api/v1/auth/token",
        data={"username": "VET@example.com", "password": app_context["vet_password"]},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["email"] == app_context["vet_email"]
    assert body["role"] == "veterinarian"
    assert body["clinic_id"] == str(app_context["clinic_id"])

    events = await _fetch_events(db_url, "auth.login")
    assert any(evt.payload and evt.payload.get("email") == "vet@example.com" for evt in events)


async def test_wrong_password_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["vet_email"], "password": "nope-nope"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401


async def test_protected_routes_require_a_valid_token(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    assert (await client.get("/api/v1/patients")).status_code == 401

    expired = create_access_token(
        str(app_context["vet_id"]),
        clinic_id=str(app_context["clinic_id"]),
        role="veterinarian",
        expires_delta=timedelta(minutes=-5),
    )
    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {expired}"}
    )
    assert response.status_code == 401


async def test_token_for_another_clinic_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    forged = create_access_token(
        str(app_context["vet_id"]),
        clinic_id="00000000-0000-4000-8000-000000000000",
        role="veterinarian",
    )
    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {forged}"}
    )
    assert response.status_code == 401


async def test_parse_rate() -> None:
    assert parse_rate("10/minute", fallback=(1, 1)) == (10, 60)
    assert parse_rate("5/hours", fallback=(1, 1)) == (5, 3600)
    assert parse_rate("garbage", fallback=(3, 30)) == (3, 30)


async def test_default_rate_limit_guards_every_route(app_context: dict[str, Any]) -> None:
    assert DEFAULT_RATE_LIMIT == (100, 60)
    assert len(api_router.dependencies) == 1

    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
