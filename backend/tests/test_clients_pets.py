"""Integration tests for client and pet APIs."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

from pawscript.core.ids import is_valid_pet_id

pytestmark = pytest.mark.asyncio


async def _authenticate(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


async def test_client_pet_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    token = await _authenticate(
        client, app_context["staff_email"], app_context["staff_password"]
    )
    headers = {"Authorization": f"Bearer {token}"}

    create_client_resp = await client.post(
        "/api/v1/clients",
        json={
            "first_name": "Morgan",
            "last_name": "Reyes",
            "email": "morgan.reyes@example.com",
            "phone": "319-555-0142",
            "city": "Cedar Rapids",
        },
        headers=headers,
    )
    assert create_client_resp.status_code == 201
    client_body = create_client_resp.json()
    client_id = client_body["id"]
    assert client_body["is_active"] is True
    assert client_body["clinic_id"] == str(app_context["clinic_id"])

    search_resp = await client.get(
        "/api/v1/clients", params={"q": "reyes"}, headers=headers
    )
    assert search_resp.status_code == 200
    assert [item["id"] for item in search_resp.json()] == [client_id]

    update_resp = await client.patch(
        f"/api/v1/clients/{client_id}",
        json={"phone": "319-555-0199", "first_name": None},
        headers=headers,
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["phone"] == "319-555-0199"
    assert update_resp.json()["first_name"] == "Morgan"

    create_pet_resp = await client.post(
        "/api/v1/pets",
        json={
            "client_id": client_id,
            "name": "Biscuit",
            "species": "dog",
            "breed": "Beagle",
            "weight": "12kg",
        },
        headers=headers,
    )
    assert create_pet_resp.status_code == 201
    pet_body = create_pet_resp.json()
    pet_id = pet_body["id"]
    assert is_valid_pet_id(pet_body["external_id"])
    assert pet_body["client_id"] == client_id

    pets_resp = await client.get(
        "/api/v1/pets", params={"client_id": client_id}, headers=headers
    )
    assert [item["id"] for item in pets_resp.json()] == [pet_id]

    owner_search = await client.get("/api/v1/pets", params={"q": "morgan"}, headers=headers)
    assert [item["id"] for item in owner_search.json()] == [pet_id]

    patch_resp = await client.patch(
        f"/api/v1/pets/{pet_id}", json={"weight": "13kg"}, headers=headers
    )
    assert patch_resp.status_code == 200
    assert patch_resp.json()["weight"] == "13kg"

    history_resp = await client.get(f"/api/v1/pets/{pet_id}/discharges", headers=headers)
    assert history_resp.status_code == 200
    assert history_resp.json() == []


async def test_pet_requires_client_in_same_clinic(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    token = await _authenticate(
        client, app_context["vet_email"], app_context["vet_password"]
    )
    headers = {"Authorization": f"Bearer {token}"}

    response = await client.post(
        "/api/v1/pets",
        json={
            "client_id": "00000000-0000-4000-8000-000000000000",
            "name": "Ghost",
            "species": "cat",
        },
        headers=headers,
    )
    assert response.status_code == 404

    missing = await client.get(
        "/api/v1/clients/00000000-0000-4000-8000-000000000000", headers=headers
    )
    assert missing.status_code == 404
