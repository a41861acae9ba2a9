"""Dose record ingestion from the companion mobile app."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.models.discharge import Discharge
from pawscript.models.dose_record import DoseRecord
from pawscript.repositories.dose_records import to_dose_record_read
from pawscript.schemas.dose_record import DoseRecordCreate, DoseRecordRead


async def log_dose_record(
    session: AsyncSession,
    payload: DoseRecordCreate,
    *,
    discharge: Discharge,
) -> DoseRecordRead:
    """Append a dose event to a discharge; records are never updated."""
    if payload.medication_id is not None and not any(
        medication.med_id == payload.medication_id
        for medication in discharge.medications
    ):
        raise ValueError("Medication does not belong to this discharge")

    symptoms = payload.symptoms
    record = DoseRecord(
        discharge_id=discharge.id,
        medication_id=payload.medication_id,
        medication_name=payload.medication_name,
        scheduled_time=payload.scheduled_time,
        given_at=payload.given_at,
        status=payload.status,
        dosage=payload.dosage,
        frequency=payload.frequency,
        instructions=payload.instructions,
        logged_at=payload.logged_at or datetime.now(UTC),
        symptom_appetite=symptoms.appetite if symptoms else None,
        symptom_energy=symptoms.energy_level if symptoms else None,
        symptom_is_panting=symptoms.is_panting if symptoms else None,
        symptom_notes=symptoms.notes if symptoms else None,
        symptom_recorded_at=symptoms.recorded_at if symptoms else None,
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return to_dose_record_read(record)

