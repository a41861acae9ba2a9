"""Dose record store: the time-range query the monitoring services run."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Protocol

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.models.dose_record import DoseRecord
from pawscript.repositories.base import RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead, SymptomSnapshot

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 500


class DoseRecordStore(Protocol):
    async def list_for_discharge(
        self,
        discharge_id: uuid.UUID,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[DoseRecordRead]:
        """Return records for one discharge, most recently scheduled first."""
        ...


def to_dose_record_read(row: DoseRecord) -> DoseRecordRead:
    """Convert an ORM row, folding the ``symptom_*`` columns into a snapshot."""
    symptoms = None
    if (
        row.symptom_appetite is not None
        and row.symptom_energy is not None
        and row.symptom_recorded_at is not None
    ):
        try:
            symptoms = SymptomSnapshot(
                appetite=row.symptom_appetite,
                energy_level=row.symptom_energy,
                is_panting=bool(row.symptom_is_panting),
                notes=row.symptom_notes,
                recorded_at=row.symptom_recorded_at,
            )
        except ValidationError:
            logger.warning(
                "Ignoring malformed symptom check-in on dose record %s", row.id
            )
    return DoseRecordRead(
        id=row.id,
        discharge_id=row.discharge_id,
        medication_id=row.medication_id,
        medication_name=row.medication_name,
        scheduled_time=row.scheduled_time,
        given_at=row.given_at,
        status=row.status,
        dosage=row.dosage,
        frequency=row.frequency,
        instructions=row.instructions,
        logged_at=row.logged_at,
        symptoms=symptoms,
    )


class SqlDoseRecordStore:
    """SQLAlchemy-backed dose record store."""

    def __init__(
        self, session: AsyncSession, *, fetch_limit: int = DEFAULT_FETCH_LIMIT
    ) -> None:
        self._session = session
        self._fetch_limit = fetch_limit

    async def list_for_discharge(
        self,
        discharge_id: uuid.UUID,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[DoseRecordRead]:
        stmt = (
            select(DoseRecord)
            .where(DoseRecord.discharge_id == discharge_id)
            .order_by(DoseRecord.scheduled_time.desc())
            .limit(min(limit or self._fetch_limit, self._fetch_limit))
        )
        if since is not None:
            stmt = stmt.where(DoseRecord.scheduled_time >= since)
        if until is not None:
            stmt = stmt.where(DoseRecord.scheduled_time <= until)
        try:
            result = await self._session.execute(stmt)
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise RecordStoreError(
                f"Failed to load dose records for discharge {discharge_id}"
            ) from exc
        return [to_dose_record_read(row) for row in rows]
