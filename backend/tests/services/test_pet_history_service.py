"""Cross-visit adherence, symptoms and overview for one pet."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest

from pawscript.models import Discharge, DischargeMedication, DoseStatus, Pet, PetType
from pawscript.repositories import RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead, SymptomSnapshot
from pawscript.services import pet_history_service
from pawscript.services.pet_history_service import EpisodeRecords

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
PET_ID = uuid.uuid4()


def _discharge(created: datetime, *medications: DischargeMedication) -> Discharge:
    return Discharge(
        id=uuid.uuid4(),
        clinic_id=uuid.uuid4(),
        pet_id=PET_ID,
        pet_name="Max",
        pet_species=PetType.DOG,
        pet_weight="32kg",
        created_at=created,
        medications=list(medications),
    )


def _medication(name: str, **fields) -> DischargeMedication:
    return DischargeMedication(name=name, med_id=f"med_{uuid.uuid4()}", times=[], **fields)


def _dose(
    discharge: Discharge,
    *,
    days_ago: float,
    status: DoseStatus = DoseStatus.GIVEN,
    name: str = "Carprofen",
    medication_id: str | None = None,
    appetite: int | None = None,
) -> DoseRecordRead:
    scheduled = NOW - timedelta(days=days_ago)
    given_at = scheduled if status == DoseStatus.GIVEN else None
    symptoms = None
    if appetite is not None:
        symptoms = SymptomSnapshot(appetite=appetite, energy_level=4, recorded_at=scheduled)
    return DoseRecordRead(
        id=uuid.uuid4(),
        discharge_id=discharge.id,
        medication_id=medication_id,
        medication_name=name,
        scheduled_time=scheduled,
        given_at=given_at,
        status=status,
        logged_at=given_at or scheduled,
        symptoms=symptoms,
    )


def _history() -> tuple[Discharge, Discharge, list[EpisodeRecords]]:
    finished = _discharge(
        NOW - timedelta(days=20),
        _medication(
            "Cephalexin",
            start_date=date(2026, 2, 18),
            end_date=date(2026, 2, 28),
        ),
    )
    current = _discharge(NOW - timedelta(days=3), _medication("Carprofen"))
    episodes = [
        EpisodeRecords(
            discharge=current,
            records=[
                _dose(current, days_ago=1),
                _dose(current, days_ago=2, status=DoseStatus.MISSED),
            ],
        ),
        EpisodeRecords(
            discharge=finished,
            records=[
                _dose(finished, days_ago=15, name="Cephalexin"),
                _dose(finished, days_ago=16, name="Cephalexin"),
            ],
        ),
    ]
    return current, finished, episodes


def test_aggregates_every_episode() -> None:
    current, finished, episodes = _history()

    report = pet_history_service.calculate_pet_adherence(
        PET_ID, episodes, day_range=90, now=NOW
    )

    assert report.aggregated.overall.total_doses == 4
    assert report.aggregated.overall.adherence_rate == 75
    assert report.active_only.total_doses == 2
    assert report.active_only.adherence_rate == 50
    assert [(e.discharge_id, e.is_active) for e in report.per_episode] == [
        (current.id, True),
        (finished.id, False),
    ]
    assert report.last_given_dose is not None
    assert report.last_given_dose.discharge_id == current.id
    assert report.is_active is True


def test_unmatched_records_are_left_out_of_active_only() -> None:
    current = _discharge(NOW - timedelta(days=3), _medication("Carprofen"))
    episodes = [
        EpisodeRecords(
            discharge=current,
            records=[_dose(current, days_ago=1, name="Unlisted drug")],
        )
    ]
    report = pet_history_service.calculate_pet_adherence(
        PET_ID, episodes, day_range=90, now=NOW
    )
    assert report.aggregated.overall.total_doses == 1
    assert report.active_only.total_doses == 0


def test_unavailable_episode_is_marked() -> None:
    current, _, episodes = _history()
    episodes[1] = EpisodeRecords(discharge=episodes[1].discharge, available=False)

    report = pet_history_service.calculate_pet_adherence(
        PET_ID, episodes, day_range=90, now=NOW
    )

    assert [e.data_status for e in report.per_episode] == ["ok", "unavailable"]
    assert report.aggregated.data_status == "ok"


def test_symptoms_are_flagged_per_episode_then_merged() -> None:
    first = _discharge(NOW - timedelta(days=30), _medication("Carprofen"))
    second = _discharge(NOW - timedelta(days=5), _medication("Carprofen"))
    episodes = [
        EpisodeRecords(
            discharge=second,
            records=[
                _dose(second, days_ago=0, appetite=1),
                _dose(second, days_ago=1, appetite=2),
            ],
        ),
        EpisodeRecords(
            discharge=first,
            records=[_dose(first, days_ago=2, appetite=2)],
        ),
    ]

    report = pet_history_service.calculate_pet_symptoms(PET_ID, episodes)

    assert [entry.date for entry in report.entries] == [
        date(2026, 3, 10),
        date(2026, 3, 9),
        date(2026, 3, 8),
    ]
    assert report.flag_count == 1
    [flag] = report.analysis.flags
    assert flag.discharge_id == second.id
    assert flag.date == date(2026, 3, 10)


def test_overview_counts_visits_and_medications() -> None:
    _, _, episodes = _history()
    pet = Pet(
        id=PET_ID,
        clinic_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        name="Max",
        species=PetType.DOG,
        weight="30kg",
    )

    overview = pet_history_service.build_pet_overview(pet, episodes, now=NOW)

    assert overview.total_visits == 2
    assert overview.active_meds_count == 1
    assert overview.archived_meds_count == 1
    assert overview.missed_dose_count == 1
    assert overview.current_status == "active"
    assert overview.pet_weight == "32kg"
    assert overview.last_visit_date == NOW - timedelta(days=3)
    assert overview.overall_adherence_rate == 75
    assert overview.active_only_adherence_rate == 50
    assert overview.data_status == "ok"


class _Discharges:
    def __init__(self, discharges: list[Discharge]) -> None:
        self.discharges = discharges

    async def list_for_pet(self, pet_id, *, clinic_id):
        return self.discharges

    async def list_for_clinic(self, clinic_id):
        return self.discharges


class _FlakyStore:
    """Serves one discharge's records and fails for any other."""

    def __init__(self, records: list[DoseRecordRead]) -> None:
        self.records = records

    async def list_for_discharge(self, discharge_id, *, since=None, until=None, limit=None):
        rows = [r for r in self.records if r.discharge_id == discharge_id]
        if not rows:
            raise RecordStoreError("partition offline")
        return rows


@pytest.mark.asyncio
async def test_failed_fetch_does_not_hide_other_episodes() -> None:
    current, finished, episodes = _history()
    store = _FlakyStore(episodes[0].records)

    report = await pet_history_service.get_pet_adherence(
        store,
        _Discharges([current, finished]),
        pet_id=PET_ID,
        clinic_id=current.clinic_id,
        now=NOW,
    )

    assert report.aggregated.overall.total_doses == 2
    assert [e.data_status for e in report.per_episode] == ["ok", "unavailable"]


@pytest.mark.asyncio
async def test_all_fetches_failing_is_unavailable() -> None:
    current, finished, _ = _history()
    store = _FlakyStore([])

    adherence = await pet_history_service.get_pet_adherence(
        store, _Discharges([current, finished]), pet_id=PET_ID, clinic_id=current.clinic_id, now=NOW
    )
    symptoms = await pet_history_service.get_pet_symptoms(
        store, _Discharges([current, finished]), pet_id=PET_ID, clinic_id=current.clinic_id, now=NOW
    )

    assert adherence.aggregated.data_status == "unavailable"
    assert symptoms.analysis.data_status == "unavailable"


def test_overlapping_visits_raise_one_flag_per_day() -> None:
    pet = Pet(
        id=PET_ID,
        clinic_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        name="Max",
        species=PetType.DOG,
    )
    earlier = _discharge(NOW - timedelta(days=6), _medication("Carprofen"))
    later = _discharge(NOW - timedelta(days=4), _medication("Gabapentin"))
    episodes = [
        EpisodeRecords(
            discharge=discharge,
            records=[
                _dose(discharge, days_ago=1, appetite=1),
                _dose(discharge, days_ago=2, appetite=2),
            ],
        )
        for discharge in (later, earlier)
    ]

    report = pet_history_service.calculate_pet_symptoms(PET_ID, episodes)
    overview = pet_history_service.build_pet_overview(pet, episodes, now=NOW)

    assert len(report.entries) == 2
    assert report.flag_count == 1
    [flag] = report.analysis.flags
    assert (flag.type, flag.date, flag.severity) == ("appetite_low", date(2026, 3, 9), "high")
    assert overview.recent_symptom_alerts == 1


def test_more_severe_overlapping_flag_is_kept() -> None:
    first = _discharge(NOW - timedelta(days=6), _medication("Carprofen"))
    second = _discharge(NOW - timedelta(days=4), _medication("Gabapentin"))
    episodes = [
        EpisodeRecords(
            discharge=first,
            records=[
                _dose(first, days_ago=1, appetite=2),
                _dose(first, days_ago=2, appetite=2),
            ],
        ),
        EpisodeRecords(
            discharge=second,
            records=[
                _dose(second, days_ago=1, appetite=1),
                _dose(second, days_ago=2, appetite=2),
            ],
        ),
    ]

    report = pet_history_service.calculate_pet_symptoms(PET_ID, episodes)

    [flag] = report.analysis.flags
    assert flag.severity == "high"
    assert flag.discharge_id == second.id


class _BrokenDischarges:
    async def list_for_pet(self, pet_id, *, clinic_id):
        raise RecordStoreError("discharges offline")

    async def list_for_clinic(self, clinic_id):
        raise RecordStoreError("discharges offline")


@pytest.mark.asyncio
async def test_overview_reports_discharge_outage() -> None:
    pet = Pet(
        id=PET_ID,
        clinic_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        name="Max",
        species=PetType.DOG,
        weight="30kg",
    )

    overview = await pet_history_service.get_pet_overview(
        _FlakyStore([]), _BrokenDischarges(), pet=pet, now=NOW
    )
    empty = await pet_history_service.get_pet_overview(
        _FlakyStore([]), _Discharges([]), pet=pet, now=NOW
    )

    assert overview.data_status == "unavailable"
    assert overview.total_visits == 0
    assert empty.data_status == "empty"
