"""Decide whether a prescribed medication, and its discharge, is still running."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from pawscript.core.timeutils import utc_date
from pawscript.models.discharge import Discharge, DischargeMedication
from pawscript.schemas.dose_record import DoseRecordRead

# Courses without an explicit end date are considered over after this many days.
OPEN_COURSE_DAYS = 30


def medication_start(medication: DischargeMedication, discharge: Discharge) -> date:
    if medication.start_date is not None:
        return medication.start_date
    return utc_date(discharge.created_at)


def is_medication_active(
    medication: DischargeMedication, discharge: Discharge, reference: date
) -> bool:
    """Apply the activity rules in order; the first that applies decides."""
    start = medication_start(medication, discharge)
    if medication.end_date is not None:
        return start <= reference <= medication.end_date
    if medication.is_tapered and medication.taper_stages:
        return any(
            stage.start_date <= reference <= stage.end_date
            for stage in medication.taper_stages
        )
    # counted (total_doses) and open-ended courses share the same window
    return (reference - start).days <= OPEN_COURSE_DAYS


def is_discharge_active(discharge: Discharge, reference: date) -> bool:
    return any(
        is_medication_active(medication, discharge, reference)
        for medication in discharge.medications
    )


def count_medications(
    discharges: Iterable[Discharge], reference: date
) -> tuple[int, int]:
    """Return ``(active, archived)`` medication counts across discharges."""
    active = archived = 0
    for discharge in discharges:
        for medication in discharge.medications:
            if is_medication_active(medication, discharge, reference):
                active += 1
            else:
                archived += 1
    return active, archived


def match_medication(
    discharge: Discharge, record: DoseRecordRead
) -> DischargeMedication | None:
    """Find the prescribed medication a dose record was logged against.

    Matches on ``med_id`` first, then on a case-insensitive name within the
    same discharge.
    """
    if record.medication_id:
        for medication in discharge.medications:
            if medication.med_id == record.medication_id:
                return medication
    name = record.medication_name.strip().lower()
    for medication in discharge.medications:
        if medication.name.strip().lower() == name:
            return medication
    return None
