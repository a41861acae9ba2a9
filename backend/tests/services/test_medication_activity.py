"""Active/archived classification and course-length helpers."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

from pawscript.models import Discharge, DischargeMedication, DoseStatus, PetType, TaperStage
from pawscript.schemas.dose_record import DoseRecordRead
from pawscript.services import medication_activity
from pawscript.services.medication_schedule import calculate_end_date, calculate_total_doses

REFERENCE = date(2026, 3, 10)


def _discharge(*medications: DischargeMedication, created: date = date(2026, 3, 1)) -> Discharge:
    return Discharge(
        id=uuid.uuid4(),
        clinic_id=uuid.uuid4(),
        pet_id=uuid.uuid4(),
        pet_name="Bella",
        pet_species=PetType.DOG,
        created_at=datetime(created.year, created.month, created.day, tzinfo=UTC),
        medications=list(medications),
    )


def _medication(name: str = "Carprofen", **fields) -> DischargeMedication:
    fields.setdefault("med_id", f"med_{uuid.uuid4()}")
    return DischargeMedication(name=name, times=[], **fields)


def test_past_end_date_is_inactive() -> None:
    medication = _medication(start_date=date(2026, 2, 1), end_date=date(2026, 3, 1))
    assert not medication_activity.is_medication_active(
        medication, _discharge(medication), REFERENCE
    )


def test_end_date_range_is_inclusive() -> None:
    medication = _medication(start_date=date(2026, 3, 1), end_date=REFERENCE)
    assert medication_activity.is_medication_active(
        medication, _discharge(medication), REFERENCE
    )


def test_tapered_medication_follows_its_stages() -> None:
    medication = _medication(
        name="Prednisone",
        is_tapered=True,
        taper_stages=[
            TaperStage(start_date=date(2026, 3, 1), end_date=date(2026, 3, 5), dosage="10mg", frequency=2, times=[]),
            TaperStage(start_date=date(2026, 3, 6), end_date=date(2026, 3, 12), dosage="5mg", frequency=1, times=[]),
        ],
    )
    discharge = _discharge(medication)
    assert medication_activity.is_medication_active(medication, discharge, REFERENCE)
    assert not medication_activity.is_medication_active(
        medication, discharge, date(2026, 3, 13)
    )


def test_open_course_expires_after_thirty_days() -> None:
    medication = _medication(total_doses=10)
    discharge = _discharge(medication, created=date(2026, 1, 1))
    assert medication_activity.is_medication_active(medication, discharge, date(2026, 1, 31))
    assert not medication_activity.is_medication_active(medication, discharge, date(2026, 2, 1))


def test_counts_active_and_archived_across_visits() -> None:
    old = _discharge(
        _medication(start_date=date(2025, 12, 1), end_date=date(2025, 12, 10)),
        created=date(2025, 12, 1),
    )
    current = _discharge(_medication(), _medication(name="Gabapentin"))
    assert medication_activity.count_medications([current, old], REFERENCE) == (2, 1)
    assert medication_activity.is_discharge_active(current, REFERENCE)
    assert not medication_activity.is_discharge_active(old, REFERENCE)


def test_match_prefers_med_id_then_name() -> None:
    carprofen = _medication()
    gabapentin = _medication(name="Gabapentin")
    discharge = _discharge(carprofen, gabapentin)

    def record(med_id: str | None, name: str) -> DoseRecordRead:
        return DoseRecordRead(
            id=uuid.uuid4(),
            discharge_id=discharge.id,
            medication_id=med_id,
            medication_name=name,
            scheduled_time=datetime(2026, 3, 9, 8, tzinfo=UTC),
            status=DoseStatus.MISSED,
            logged_at=datetime(2026, 3, 9, 9, tzinfo=UTC),
        )

    assert medication_activity.match_medication(discharge, record(gabapentin.med_id, "Carprofen")) is gabapentin
    assert medication_activity.match_medication(discharge, record(None, " carprofen ")) is carprofen
    assert medication_activity.match_medication(discharge, record(None, "Tramadol")) is None


def test_every_other_day_end_date() -> None:
    assert calculate_end_date(date(2026, 3, 1), 5) == date(2026, 3, 9)
    assert calculate_end_date(date(2026, 3, 1), 1) == date(2026, 3, 1)
    assert calculate_end_date(None, 5) is None
    assert calculate_end_date(date(2026, 3, 1), 0) is None


def test_total_doses_from_range() -> None:
    assert calculate_total_doses(date(2026, 3, 1), date(2026, 3, 10), 2) == 20
    assert calculate_total_doses(date(2026, 3, 1), date(2026, 3, 9), 1, True) == 5
    assert calculate_total_doses(date(2026, 3, 1), date(2026, 3, 3), 0.5) == 2
    assert calculate_total_doses(date(2026, 3, 5), date(2026, 3, 1), 1) is None
    assert calculate_total_doses(date(2026, 3, 1), None, 1) is None
