"""Discharge store used by the cross-episode and dashboard services."""

from __future__ import annotations

import uuid
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from pawscript.models.client import Client
from pawscript.models.discharge import Discharge, DischargeMedication
from pawscript.models.pet import Pet
from pawscript.repositories.base import RecordStoreError


class DischargeStore(Protocol):
    async def list_for_pet(
        self, pet_id: uuid.UUID, *, clinic_id: uuid.UUID
    ) -> Sequence[Discharge]:
        """Return every discharge for one pet, newest first."""
        ...

    async def list_for_clinic(
        self, clinic_id: uuid.UUID
    ) -> Sequence[Discharge]:
        """Return every discharge for a clinic, newest first."""
        ...


def discharge_query() -> Select[tuple[Discharge]]:
    """Base discharge query with medications, stages and owner eager-loaded."""
    return (
        select(Discharge)
        .options(
            selectinload(Discharge.medications).selectinload(
                DischargeMedication.taper_stages
            ),
            selectinload(Discharge.pet).selectinload(Pet.client),
        )
        .order_by(Discharge.created_at.desc())
    )


class SqlDischargeStore:
    """SQLAlchemy-backed discharge store."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _all(self, stmt: Select[tuple[Discharge]]) -> Sequence[Discharge]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise RecordStoreError("Failed to load discharges") from exc
        return result.scalars().unique().all()

    async def list_for_pet(
        self, pet_id: uuid.UUID, *, clinic_id: uuid.UUID
    ) -> Sequence[Discharge]:
        stmt = discharge_query().where(
            Discharge.pet_id == pet_id, Discharge.clinic_id == clinic_id
        )
        return await self._all(stmt)

    async def list_for_clinic(self, clinic_id: uuid.UUID) -> Sequence[Discharge]:
        stmt = (
            discharge_query()
            .join(Discharge.pet)
            .join(Pet.client)
            .where(Discharge.clinic_id == clinic_id, Client.clinic_id == clinic_id)
        )
        return await self._all(stmt)
