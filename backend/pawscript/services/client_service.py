"""Client (pet owner) management helpers."""

from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from pawscript.models.client import Client
from pawscript.schemas.client import ClientCreate, ClientUpdate


def _base_client_query(clinic_id: uuid.UUID) -> Select[tuple[Client]]:
    return (
        select(Client)
        .where(Client.clinic_id == clinic_id)
        .order_by(Client.last_name, Client.first_name)
    )


async def list_clients(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    is_active: bool | None = None,
) -> Sequence[Client]:
    """Return paginated clients, optionally filtered by a name/email/phone search."""
    stmt = _base_client_query(clinic_id)
    if is_active is not None:
        stmt = stmt.where(Client.is_active.is_(is_active))
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Client.first_name).like(pattern),
                func.lower(Client.last_name).like(pattern),
                func.lower(func.coalesce(Client.email, "")).like(pattern),
                func.lower(func.coalesce(Client.phone, "")).like(pattern),
            )
        )
    stmt = stmt.offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_client(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    client_id: uuid.UUID,
) -> Client | None:
    stmt = _base_client_query(clinic_id).where(Client.id == client_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_client(
    session: AsyncSession,
    payload: ClientCreate,
    *,
    clinic_id: uuid.UUID,
) -> Client:
    client = Client(clinic_id=clinic_id, **payload.model_dump())
    session.add(client)
    await session.commit()
    await session.refresh(client)
    return client


async def update_client(
    session: AsyncSession,
    *,
    client: Client,
    payload: ClientUpdate,
) -> Client:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in {"first_name", "last_name", "is_active"}:
            continue
        setattr(client, field, value)
    await session.commit()
    await session.refresh(client)
    return client
