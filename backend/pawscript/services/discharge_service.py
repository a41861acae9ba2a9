"""Discharge summary authoring and lookup."""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.data.medication_templates import get_medication_template
from pawscript.models.discharge import Discharge, DischargeMedication, TaperStage
from pawscript.repositories.discharges import discharge_query
from pawscript.schemas.discharge import DischargeCreate, MedicationCreate, TaperStageCreate
from pawscript.services import pet_service
from pawscript.services.medication_schedule import (
    calculate_end_date,
    calculate_total_doses,
)

logger = logging.getLogger(__name__)


def _build_stage(position: int, payload: TaperStageCreate) -> TaperStage:
    total_doses = payload.total_doses
    if total_doses is None:
        total_doses = calculate_total_doses(
            payload.start_date,
            payload.end_date,
            payload.frequency,
            payload.is_every_other_day,
        )
    return TaperStage(
        position=position,
        start_date=payload.start_date,
        end_date=payload.end_date,
        dosage=payload.dosage,
        frequency=payload.frequency,
        times=list(payload.times),
        total_doses=total_doses,
        is_every_other_day=payload.is_every_other_day,
    )


def build_medication(position: int, payload: MedicationCreate) -> DischargeMedication:
    """Turn a prescription payload into a medication row.

    Blank instructions are filled from the template library. Every-other-day
    courses derive their end date from the dose count; daily courses with a
    date range derive the dose count.
    """
    instructions = payload.instructions.strip()
    if not instructions:
        template = get_medication_template(payload.name)
        if template is not None:
            instructions = template.default_instructions

    end_date = payload.end_date
    total_doses = payload.total_doses
    if not payload.is_tapered:
        if payload.is_every_other_day:
            if end_date is None:
                end_date = calculate_end_date(payload.start_date, total_doses)
        elif total_doses is None:
            total_doses = calculate_total_doses(
                payload.start_date, end_date, payload.frequency
            )

    return DischargeMedication(
        position=position,
        name=payload.name.strip(),
        is_tapered=payload.is_tapered,
        dosage=payload.dosage,
        frequency=payload.frequency,
        times=list(payload.times),
        start_date=payload.start_date,
        end_date=end_date,
        total_doses=total_doses,
        is_every_other_day=payload.is_every_other_day,
        instructions=instructions,
        allow_client_to_adjust_time=payload.allow_client_to_adjust_time,
        taper_stages=[
            _build_stage(index, stage)
            for index, stage in enumerate(payload.taper_stages)
        ],
    )


async def get_discharge(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    discharge_id: uuid.UUID,
) -> Discharge | None:
    stmt = discharge_query().where(
        Discharge.id == discharge_id, Discharge.clinic_id == clinic_id
    )
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


async def list_discharges(
    session: AsyncSession,
    *,
    clinic_id: uuid.UUID,
    pet_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Discharge]:
    stmt = discharge_query().where(Discharge.clinic_id == clinic_id)
    if pet_id is not None:
        stmt = stmt.where(Discharge.pet_id == pet_id)
    stmt = stmt.offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def create_discharge(
    session: AsyncSession,
    payload: DischargeCreate,
    *,
    clinic_id: uuid.UUID,
    vet_id: uuid.UUID | None,
) -> Discharge:
    """Create a discharge for a pet, snapshotting its name, species and weight."""
    pet = await pet_service.get_pet(session, clinic_id=clinic_id, pet_id=payload.pet_id)
    if pet is None:
        raise ValueError("Pet not found for clinic")

    discharge = Discharge(
        clinic_id=clinic_id,
        pet_id=pet.id,
        vet_id=vet_id,
        pet_name=pet.name,
        pet_species=pet.species,
        pet_weight=payload.pet_weight or pet.weight,
        diagnosis=payload.diagnosis,
        notes=payload.notes,
        visit_date=payload.visit_date,
        medications=[
            build_medication(index, medication)
            for index, medication in enumerate(payload.medications)
        ],
    )
    session.add(discharge)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    logger.info(
        "Created discharge %s with %s medications for pet %s",
        discharge.id,
        len(payload.medications),
        pet.external_id,
    )
    # reload so eager-loaded relationships reflect the committed rows
    stmt = (
        discharge_query()
        .where(Discharge.id == discharge.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().unique().one()
