"""Clinic patient list."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from pawscript.api import deps
from pawscript.models.user import User
from pawscript.repositories import SqlDischargeStore, SqlDoseRecordStore
from pawscript.schemas.monitoring import AlertLevel, PatientSummary
from pawscript.services import patient_dashboard_service

router = APIRouter()


@router.get("", response_model=list[PatientSummary], summary="Patient list")
async def list_patients(
    current_user: Annotated[User, Depends(deps.get_current_user)],
    store: Annotated[SqlDoseRecordStore, Depends(deps.get_dose_record_store)],
    discharges: Annotated[SqlDischargeStore, Depends(deps.get_discharge_store)],
    is_active: bool | None = Query(default=None),
    alert_level: AlertLevel | None = Query(default=None),
    q: str | None = Query(default=None),
) -> list[PatientSummary]:
    """One row per discharge with adherence and alert level."""
    summaries = await patient_dashboard_service.list_patient_summaries(
        store,
        discharges,
        clinic_id=current_user.clinic_id,
        is_active=is_active,
        alert_level=alert_level,
        search=q,
    )
    return list(summaries)
