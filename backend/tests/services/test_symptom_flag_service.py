"""Symptom entry extraction, flag rules and trends."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest

from pawscript.models.dose_record import DoseStatus
from pawscript.repositories import RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead, SymptomSnapshot
from pawscript.schemas.monitoring import SymptomEntry, SymptomFlag
from pawscript.services import symptom_flag_service

TODAY = date(2024, 1, 20)


def _entry(
    days_ago: int,
    *,
    appetite: int = 4,
    energy: int = 4,
    panting: bool = False,
) -> SymptomEntry:
    day = TODAY - timedelta(days=days_ago)
    return SymptomEntry(
        date=day,
        appetite=appetite,
        energy_level=energy,
        is_panting=panting,
        recorded_at=datetime(day.year, day.month, day.day, 9, tzinfo=UTC),
    )


def _record(scheduled: datetime, *, appetite: int, recorded_at: datetime) -> DoseRecordRead:
    return DoseRecordRead(
        id=uuid.uuid4(),
        discharge_id=uuid.uuid4(),
        medication_name="Prednisone",
        scheduled_time=scheduled,
        given_at=scheduled,
        status=DoseStatus.GIVEN,
        logged_at=scheduled,
        symptoms=SymptomSnapshot(
            appetite=appetite, energy_level=3, recorded_at=recorded_at
        ),
    )


def test_two_consecutive_low_appetite_days_flag_the_latest() -> None:
    entries = [
        SymptomEntry(
            date=date(2024, 1, 2),
            appetite=1,
            energy_level=4,
            is_panting=False,
            recorded_at=datetime(2024, 1, 2, 9, tzinfo=UTC),
        ),
        SymptomEntry(
            date=date(2024, 1, 1),
            appetite=2,
            energy_level=4,
            is_panting=False,
            recorded_at=datetime(2024, 1, 1, 9, tzinfo=UTC),
        ),
    ]

    flags = symptom_flag_service.detect_symptom_flags(entries)

    assert len(flags) == 1
    [flag] = flags
    assert flag.type == "appetite_low"
    assert flag.date == date(2024, 1, 2)
    assert flag.severity == "high"
    assert flag.description == "Low appetite (1/5) for 2+ consecutive days"


def test_isolated_low_day_is_not_flagged() -> None:
    entries = [_entry(0, appetite=2), _entry(1, appetite=4), _entry(2, appetite=4)]
    flags = symptom_flag_service.detect_symptom_flags(entries)
    assert not [flag for flag in flags if flag.type == "appetite_low"]


def test_low_days_with_a_gap_are_not_consecutive() -> None:
    entries = [_entry(0, energy=2), _entry(2, energy=2)]
    assert symptom_flag_service.detect_symptom_flags(entries) == []


def test_flag_detection_is_idempotent() -> None:
    entries = [
        _entry(0, appetite=1, energy=2, panting=True),
        _entry(1, appetite=2, energy=2, panting=True),
        _entry(2, appetite=5, energy=5),
        _entry(3, appetite=5, energy=5),
        _entry(4, appetite=5, energy=4),
    ]
    first = symptom_flag_service.detect_symptom_flags(entries)
    second = symptom_flag_service.detect_symptom_flags(entries)
    assert first == second
    assert [(f.type, f.date) for f in first] == [(f.type, f.date) for f in second]


def test_drop_against_preceding_week() -> None:
    entries = [_entry(0, energy=2), _entry(1, energy=5), _entry(2, energy=5), _entry(3, energy=4)]

    flags = symptom_flag_service.detect_symptom_flags(entries)

    [drop] = [flag for flag in flags if flag.type == "energy_drop"]
    assert drop.date == TODAY
    assert drop.value == 2
    assert drop.previous_value == 4.7
    assert drop.severity == "medium"


def test_drop_needs_three_prior_entries() -> None:
    entries = [_entry(0, appetite=1), _entry(1, appetite=5), _entry(2, appetite=5)]
    flags = symptom_flag_service.detect_symptom_flags(entries)
    assert not [flag for flag in flags if flag.type == "appetite_drop"]


def test_severe_drop_is_high() -> None:
    entries = [_entry(0, appetite=1)] + [_entry(day, appetite=5) for day in range(2, 6)]
    [drop] = [
        flag
        for flag in symptom_flag_service.detect_symptom_flags(entries)
        if flag.type == "appetite_drop"
    ]
    assert drop.severity == "high"


def test_persistent_panting() -> None:
    entries = [_entry(0, panting=True), _entry(1, panting=True), _entry(2)]
    flags = symptom_flag_service.detect_symptom_flags(entries)
    assert [(flag.type, flag.date) for flag in flags] == [("panting_persistent", TODAY)]


def test_improving_trend_from_recent_window() -> None:
    entries = [
        _entry(index, appetite=value) for index, value in enumerate([5, 5, 5, 2, 2, 2])
    ]
    trends = symptom_flag_service.calculate_symptom_trends(entries)
    assert trends.appetite.trend == "improving"
    assert trends.appetite.current == 5
    assert trends.appetite.seven_day_average == 3.5


def test_declining_and_stable_trends() -> None:
    declining = [_entry(i, energy=v) for i, v in enumerate([2, 2, 2, 4, 4, 4])]
    short = [_entry(i, energy=v) for i, v in enumerate([1, 5])]
    assert symptom_flag_service.calculate_symptom_trends(declining).energy.trend == "declining"
    assert symptom_flag_service.calculate_symptom_trends(short).energy.trend == "stable"


def test_frequent_panting_threshold() -> None:
    entries = [_entry(i, panting=i < 4) for i in range(7)]
    trends = symptom_flag_service.calculate_symptom_trends(entries, panting_frequent_days=4)
    assert trends.panting.recent_days == 4
    assert trends.panting.is_frequent is True
    fewer = symptom_flag_service.calculate_symptom_trends(entries[1:], panting_frequent_days=4)
    assert fewer.panting.is_frequent is False


def test_latest_check_in_wins_for_a_day() -> None:
    morning = datetime(2024, 1, 5, 8, tzinfo=UTC)
    evening = datetime(2024, 1, 5, 20, tzinfo=UTC)
    records = [
        _record(evening, appetite=2, recorded_at=evening),
        _record(morning, appetite=5, recorded_at=morning),
        _record(datetime(2024, 1, 4, 8, tzinfo=UTC), appetite=3, recorded_at=morning - timedelta(days=1)),
    ]

    entries = symptom_flag_service.extract_symptom_entries(records)

    assert [entry.date for entry in entries] == [date(2024, 1, 5), date(2024, 1, 4)]
    assert entries[0].appetite == 2


def test_records_without_symptoms_are_skipped() -> None:
    record = DoseRecordRead(
        id=uuid.uuid4(),
        discharge_id=uuid.uuid4(),
        medication_name="Carprofen",
        scheduled_time=datetime(2024, 1, 5, 8, tzinfo=UTC),
        status=DoseStatus.MISSED,
        logged_at=datetime(2024, 1, 5, 9, tzinfo=UTC),
    )
    assert symptom_flag_service.extract_symptom_entries([record]) == []
    assert symptom_flag_service.analyze_entries([]).data_status == "empty"


def test_merge_keeps_latest_entry_per_day() -> None:
    early = _entry(0, appetite=4)
    late = early.model_copy(
        update={"appetite": 2, "recorded_at": early.recorded_at + timedelta(hours=3)}
    )
    merged = symptom_flag_service.merge_symptom_entries([[early, _entry(1)], [late]])
    assert [entry.appetite for entry in merged] == [2, 4]


def test_flag_formatting_and_date_lookup() -> None:
    flag = SymptomFlag(
        type="appetite_low",
        date=date(2024, 1, 2),
        description="Low appetite (1/5) for 2+ consecutive days",
        severity="high",
        value=1,
    )
    drop = SymptomFlag(
        type="energy_drop",
        date=date(2024, 1, 3),
        description="Energy dropped",
        severity="medium",
        value=2,
        previous_value=4.7,
    )

    assert (
        symptom_flag_service.format_symptom_flag(flag)
        == "Jan 2: Low appetite (1/5) for multiple days"
    )
    assert (
        symptom_flag_service.format_symptom_flag(drop)
        == "Jan 3: Energy dropped from 4.7 to 2"
    )
    assert symptom_flag_service.has_symptom_flags_on_date([flag, drop], date(2024, 1, 3))
    assert symptom_flag_service.get_symptom_flags_for_date([flag, drop], date(2024, 1, 2)) == [flag]


class _FailingStore:
    async def list_for_discharge(self, discharge_id, *, since=None, until=None, limit=None):
        raise RecordStoreError("store offline")


@pytest.mark.asyncio
async def test_store_failure_yields_unavailable_analysis() -> None:
    analysis = await symptom_flag_service.analyze_symptoms(_FailingStore(), uuid.uuid4())
    assert analysis.data_status == "unavailable"
    assert analysis.flags == []
    assert await symptom_flag_service.get_symptom_flag_count(_FailingStore(), uuid.uuid4()) == 0
