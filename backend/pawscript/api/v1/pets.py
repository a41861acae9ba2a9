"""Pet management and cross-visit monitoring API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.api import deps
from pawscript.models.pet import Pet
from pawscript.models.user import User
from pawscript.repositories import SqlDischargeStore, SqlDoseRecordStore
from pawscript.schemas.discharge import DischargeRead
from pawscript.schemas.monitoring import PetAdherenceReport, PetOverview, PetSymptomReport
from pawscript.schemas.pet import PetCreate, PetRead, PetUpdate
from pawscript.services import (
    audit_service,
    discharge_service,
    pet_history_service,
    pet_service,
)

router = APIRouter()


async def _get_pet_or_404(
    session: AsyncSession, current_user: User, pet_id: uuid.UUID
) -> Pet:
    pet = await pet_service.get_pet(
        session, clinic_id=current_user.clinic_id, pet_id=pet_id
    )
    if pet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pet not found")
    return pet


@router.get("", response_model=list[PetRead], summary="List pets")
async def list_pets(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    skip: int = 0,
    limit: int = 50,
    client_id: uuid.UUID | None = Query(default=None),
    q: str | None = Query(default=None, alias="q"),
) -> list[PetRead]:
    """Return pets for the authenticated user's clinic."""
    pets = await pet_service.list_pets(
        session,
        clinic_id=current_user.clinic_id,
        skip=skip,
        limit=min(limit, 100),
        client_id=client_id,
        search=q,
    )
    return [PetRead.model_validate(pet) for pet in pets]


@router.post(
    "",
    response_model=PetRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create pet",
)
async def create_pet(
    payload: PetCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> PetRead:
    """Create a pet profile."""
    try:
        pet = await pet_service.create_pet(
            session, payload, clinic_id=current_user.clinic_id
        )
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to create pet"
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Related resource not found",
        ) from exc
    await audit_service.record_event(
        session,
        clinic_id=current_user.clinic_id,
        user_id=current_user.id,
        event_type="pet.created",
        entity_id=pet.external_id,
    )
    return PetRead.model_validate(pet)


@router.get("/{pet_id}", response_model=PetRead, summary="Get pet")
async def get_pet(
    pet_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> PetRead:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    return PetRead.model_validate(pet)


@router.patch("/{pet_id}", response_model=PetRead, summary="Update pet")
async def update_pet(
    pet_id: uuid.UUID,
    payload: PetUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> PetRead:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    try:
        pet = await pet_service.update_pet(
            session, pet=pet, clinic_id=current_user.clinic_id, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PetRead.model_validate(pet)


@router.get(
    "/{pet_id}/discharges",
    response_model=list[DischargeRead],
    summary="Discharge history for a pet",
)
async def list_pet_discharges(
    pet_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> list[DischargeRead]:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    discharges = await discharge_service.list_discharges(
        session, clinic_id=current_user.clinic_id, pet_id=pet.id, limit=100
    )
    return [DischargeRead.model_validate(discharge) for discharge in discharges]


@router.get(
    "/{pet_id}/adherence",
    response_model=PetAdherenceReport,
    summary="Adherence across every visit",
)
async def get_pet_adherence(
    pet_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    discharges: Annotated[SqlDischargeStore, Depends(deps.get_discharge_store)],
    day_range: int | None = Query(default=None, ge=1, le=365),
) -> PetAdherenceReport:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    return await pet_history_service.get_pet_adherence(
        store,
        discharges,
        pet_id=pet.id,
        clinic_id=current_user.clinic_id,
        day_range=day_range,
    )


@router.get(
    "/{pet_id}/symptoms",
    response_model=PetSymptomReport,
    summary="Symptom analysis across every visit",
)
async def get_pet_symptoms(
    pet_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    discharges: Annotated[SqlDischargeStore, Depends(deps.get_discharge_store)],
    day_range: int | None = Query(default=None, ge=1, le=365),
) -> PetSymptomReport:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    return await pet_history_service.get_pet_symptoms(
        store,
        discharges,
        pet_id=pet.id,
        clinic_id=current_user.clinic_id,
        day_range=day_range,
    )


@router.get(
    "/{pet_id}/overview",
    response_model=PetOverview,
    summary="Quick-glance patient header",
)
async def get_pet_overview(
    pet_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    discharges: Annotated[SqlDischargeStore, Depends(deps.get_discharge_store)],
) -> PetOverview:
    pet = await _get_pet_or_404(session, current_user, pet_id)
    return await pet_history_service.get_pet_overview(store, discharges, pet=pet)
