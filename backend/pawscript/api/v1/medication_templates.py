"""Read-only medication catalogue."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from pawscript.api import deps
from pawscript.data.medication_templates import FREQUENCY_OPTIONS, MEDICATION_TEMPLATES
from pawscript.models.user import User
from pawscript.schemas.medication_template import MedicationCatalog

router = APIRouter()


@router.get("", response_model=MedicationCatalog, summary="Medication templates")
async def list_medication_templates(
    _: Annotated[User, Depends(deps.get_current_user)],
) -> MedicationCatalog:
    """Common drugs with default instructions, plus dosing frequencies."""
    return MedicationCatalog(
        templates=list(MEDICATION_TEMPLATES),
        frequencies=list(FREQUENCY_OPTIONS),
    )
