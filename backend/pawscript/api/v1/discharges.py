"""Discharge authoring, dose logging and per-discharge monitoring API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.api import deps
from pawscript.models.discharge import Discharge
from pawscript.models.user import User
from pawscript.repositories import SqlDoseRecordStore
from pawscript.schemas.discharge import DischargeCreate, DischargeRead
from pawscript.schemas.dose_record import DoseRecordCreate, DoseRecordRead
from pawscript.schemas.monitoring import (
    AdherenceMetrics,
    AdherenceSummary,
    SymptomAnalysis,
    TimelineEvent,
)
from pawscript.services import (
    adherence_service,
    audit_service,
    discharge_service,
    dose_record_service,
    patient_dashboard_service,
    symptom_flag_service,
)

router = APIRouter()

DayRange = Annotated[int, Query(ge=1, le=365)]


async def _get_discharge_or_404(
    session: AsyncSession, current_user: User, discharge_id: uuid.UUID
) -> Discharge:
    discharge = await discharge_service.get_discharge(
        session, clinic_id=current_user.clinic_id, discharge_id=discharge_id
    )
    if discharge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Discharge not found"
        )
    return discharge


@router.get("", response_model=list[DischargeRead], summary="List discharges")
async def list_discharges(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    skip: int = 0,
    limit: int = 50,
    pet_id: uuid.UUID | None = Query(default=None),
) -> list[DischargeRead]:
    discharges = await discharge_service.list_discharges(
        session,
        clinic_id=current_user.clinic_id,
        pet_id=pet_id,
        skip=skip,
        limit=min(limit, 100),
    )
    return [DischargeRead.model_validate(discharge) for discharge in discharges]


@router.post(
    "",
    response_model=DischargeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create discharge summary",
)
async def create_discharge(
    payload: DischargeCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_prescriber)],
) -> DischargeRead:
    try:
        discharge = await discharge_service.create_discharge(
            session,
            payload,
            clinic_id=current_user.clinic_id,
            vet_id=current_user.id,
        )
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to create discharge",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    await audit_service.record_event(
        session,
        clinic_id=current_user.clinic_id,
        user_id=current_user.id,
        event_type="discharge.created",
        entity_id=discharge.id,
        payload={"pet_id": str(discharge.pet_id)},
    )
    return DischargeRead.model_validate(discharge)


@router.get("/{discharge_id}", response_model=DischargeRead, summary="Get discharge")
async def get_discharge(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> DischargeRead:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    return DischargeRead.model_validate(discharge)


@router.post(
    "/{discharge_id}/dose-records",
    response_model=DoseRecordRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log a dose event",
)
async def log_dose_record(
    discharge_id: uuid.UUID,
    payload: DoseRecordCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> DoseRecordRead:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    try:
        return await dose_record_service.log_dose_record(
            session, payload, discharge=discharge
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get(
    "/{discharge_id}/dose-records",
    response_model=list[DoseRecordRead],
    summary="Recent dose events",
)
async def list_dose_records(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[DoseRecordRead]:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    return await adherence_service.get_recent_dose_records(
        store, discharge.id, limit=limit
    )


@router.get(
    "/{discharge_id}/adherence",
    response_model=AdherenceMetrics,
    summary="Adherence metrics",
)
async def get_adherence(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    day_range: DayRange = adherence_service.DEFAULT_DAY_RANGE,
) -> AdherenceMetrics:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    return await adherence_service.get_adherence_metrics(
        store, discharge.id, day_range=day_range
    )


@router.get(
    "/{discharge_id}/adherence/summary",
    response_model=AdherenceSummary,
    summary="Adherence headline figures",
)
async def get_adherence_summary(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
) -> AdherenceSummary:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    return await adherence_service.get_patient_adherence_summary(store, discharge.id)


@router.get(
    "/{discharge_id}/symptoms",
    response_model=SymptomAnalysis,
    summary="Symptom analysis",
)
async def get_symptoms(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    day_range: DayRange = adherence_service.DEFAULT_DAY_RANGE,
) -> SymptomAnalysis:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    return await symptom_flag_service.analyze_symptoms(
        store, discharge.id, day_range=day_range
    )


@router.get(
    "/{discharge_id}/timeline",
    response_model=list[TimelineEvent],
    summary="Dose events and symptom alerts",
)
async def get_timeline(
    discharge_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[TimelineEvent]:
    discharge = await _get_discharge_or_404(session, current_user, discharge_id)
    records = await adherence_service.get_recent_dose_records(
        store, discharge.id, limit=limit
    )
    analysis = await symptom_flag_service.analyze_symptoms(store, discharge.id)
    return patient_dashboard_service.build_timeline_events(
        records, analysis, discharge_id=discharge.id
    )
