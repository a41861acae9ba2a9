"""Pet management service helpers."""

from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from pawscript.models.client import Client
from pawscript.models.pet import Pet
from pawscript.schemas.pet import PetCreate, PetUpdate


def _base_pet_query(clinic_id: uuid.UUID) -> Select[tuple[Pet]]:
    """Return a base query for pets scoped to a clinic."""
    return (
        select(Pet)
        .join(Pet.client)
        .options(selectinload(Pet.client))
        .where(Pet.clinic_id == clinic_id)
        .order_by(Pet.created_at.desc())
    )


async def list_pets(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    skip: int = 0,
    limit: int = 50,
    client_id: uuid.UUID | None = None,
    search: str | None = None,
) -> Sequence[Pet]:
    """Return paginated pets for a clinic."""
    stmt = _base_pet_query(clinic_id)
    if client_id is not None:
        stmt = stmt.where(Pet.client_id == client_id)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Pet.name).like(pattern),
                func.lower(func.coalesce(Pet.breed, "")).like(pattern),
                func.lower(func.coalesce(Pet.microchip_number, "")).like(pattern),
                func.lower(Client.first_name).like(pattern),
                func.lower(Client.last_name).like(pattern),
            )
        )
    stmt = stmt.offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def get_pet(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    pet_id: uuid.UUID,
) -> Pet | None:
    """Return a single pet scoped to the clinic."""
    stmt = _base_pet_query(clinic_id).where(Pet.id == pet_id)
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


async def _validate_client(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    client_id: uuid.UUID,
) -> Client:
    client = await session.get(Client, client_id)
    if client is None or client.clinic_id != clinic_id:
        raise ValueError("Client does not belong to the provided clinic")
    return client


async def create_pet(
    session: AsyncSession,
    payload: PetCreate,
    *,
    clinic_id: uuid.UUID,
) -> Pet:
    """Create a pet profile; a fresh ``pet_<uuid>`` external id is assigned."""
    client = await _validate_client(
        session, clinic_id=clinic_id, client_id=payload.client_id
    )
    pet = Pet(clinic_id=clinic_id, **payload.model_dump(exclude={"client_id"}))
    pet.client_id = client.id
    session.add(pet)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(pet)
    await session.refresh(pet, attribute_names=["client"])
    return pet


async def update_pet(
    session: AsyncSession,
    *,
    pet: Pet,
    clinic_id: uuid.UUID,
    payload: PetUpdate,
) -> Pet:
    """Update an existing pet profile."""
    if pet.clinic_id != clinic_id:
        raise ValueError("Pet does not belong to the provided clinic")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in {"name", "species", "is_active"}:
            continue
        setattr(pet, field, value)
    session.add(pet)
    await session.commit()
    await session.refresh(pet)
    await session.refresh(pet, attribute_names=["client"])
    return pet
