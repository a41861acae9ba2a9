"""Symptom check-in analysis: per-day entries, alert flags and trends.

Owners attach an appetite/energy/panting check-in to dose logs. The engine
collapses those into one entry per calendar day (the latest check-in wins),
scans consecutive days for sustained lows, compares each day against the week
that preceded it, and summarizes the direction of travel.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime, timedelta
from statistics import fmean
from typing import Callable, Iterable, Sequence

from pawscript.core.config import get_settings
from pawscript.core.timeutils import coerce_utc, utc_date
from pawscript.repositories import DoseRecordStore, RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead
from pawscript.schemas.monitoring import (
    PantingTrend,
    ScoreTrend,
    SymptomAnalysis,
    SymptomEntry,
    SymptomFlag,
    SymptomTrends,
    TrendDirection,
)
from pawscript.services.adherence_service import DEFAULT_DAY_RANGE, round_one_decimal

logger = logging.getLogger(__name__)

LOW_SCORE = 2
DROP_THRESHOLD = 2
SEVERE_DROP_THRESHOLD = 3
ROLLING_WINDOW = 7
MIN_ROLLING_ENTRIES = 3
TREND_WINDOW = 3
TREND_DEAD_BAND = 0.5
RECENT_ENTRY_COUNT = 14
FLAG_COUNT_DAY_RANGE = 14


def extract_symptom_entries(
    records: Iterable[DoseRecordRead],
) -> list[SymptomEntry]:
    """One entry per scheduled UTC date, most recent date first."""
    by_day: dict[date, SymptomEntry] = {}
    for record in records:
        snapshot = record.symptoms
        if snapshot is None:
            continue
        day = utc_date(record.scheduled_time)
        current = by_day.get(day)
        if current is not None and current.recorded_at >= snapshot.recorded_at:
            continue
        by_day[day] = SymptomEntry(
            date=day,
            appetite=snapshot.appetite,
            energy_level=snapshot.energy_level,
            is_panting=snapshot.is_panting,
            notes=snapshot.notes,
            recorded_at=snapshot.recorded_at,
            discharge_id=record.discharge_id,
            medication_name=record.medication_name,
        )
    return sorted(by_day.values(), key=lambda entry: entry.date, reverse=True)


def merge_symptom_entries(
    entry_sets: Iterable[Sequence[SymptomEntry]],
) -> list[SymptomEntry]:
    """Merge per-discharge entries, keeping the latest check-in for each day."""
    by_day: dict[date, SymptomEntry] = {}
    for entries in entry_sets:
        for entry in entries:
            current = by_day.get(entry.date)
            if current is None or entry.recorded_at > current.recorded_at:
                by_day[entry.date] = entry
    return sorted(by_day.values(), key=lambda entry: entry.date, reverse=True)


def _low_flag(
    kind: str, label: str, today: SymptomEntry, value: int
) -> SymptomFlag:
    return SymptomFlag(
        type=f"{kind}_low",
        date=today.date,
        description=f"Low {label} ({value}/5) for 2+ consecutive days",
        severity="high" if value == 1 else "medium",
        value=value,
    )


def _drop_flag(
    kind: str, label: str, today: SymptomEntry, value: int, average: float
) -> SymptomFlag:
    drop = average - value
    return SymptomFlag(
        type=f"{kind}_drop",
        date=today.date,
        description=(
            f"{label.capitalize()} dropped {round_one_decimal(drop)} points "
            "below recent average"
        ),
        severity="high" if drop >= SEVERE_DROP_THRESHOLD else "medium",
        value=value,
        previous_value=round_one_decimal(average),
    )


_SCORES: tuple[tuple[str, str, Callable[[SymptomEntry], int]], ...] = (
    ("appetite", "appetite", lambda entry: entry.appetite),
    ("energy", "energy", lambda entry: entry.energy_level),
)


def detect_symptom_flags(entries: Sequence[SymptomEntry]) -> list[SymptomFlag]:
    """Evaluate flag rules for each day; ``entries`` must be most-recent-first."""
    flags: dict[tuple[str, date], SymptomFlag] = {}

    def add(flag: SymptomFlag) -> None:
        flags.setdefault((flag.type, flag.date), flag)

    for index, today in enumerate(entries):
        previous = entries[index + 1] if index + 1 < len(entries) else None
        yesterday = (
            previous
            if previous is not None and today.date - previous.date == timedelta(days=1)
            else None
        )
        preceding = entries[index + 1 : index + 1 + ROLLING_WINDOW]

        for kind, label, score in _SCORES:
            value = score(today)
            if yesterday is not None and value <= LOW_SCORE and score(yesterday) <= LOW_SCORE:
                add(_low_flag(kind, label, today, value))
            if len(preceding) >= MIN_ROLLING_ENTRIES:
                average = fmean(score(entry) for entry in preceding)
                if average - value >= DROP_THRESHOLD:
                    add(_drop_flag(kind, label, today, value, average))

        if yesterday is not None and today.is_panting and yesterday.is_panting:
            add(
                SymptomFlag(
                    type="panting_persistent",
                    date=today.date,
                    description="Persistent panting for 2+ consecutive days",
                    severity="medium",
                )
            )

    return sorted(flags.values(), key=lambda flag: flag.date, reverse=True)


def _trend(values: Sequence[int]) -> TrendDirection:
    """Mean of the 3 most recent values against the mean of the 3 before them."""
    recent = values[:TREND_WINDOW]
    prior = values[TREND_WINDOW : TREND_WINDOW * 2]
    if not recent or not prior:
        return "stable"
    difference = fmean(recent) - fmean(prior)
    if difference > TREND_DEAD_BAND:
        return "improving"
    if difference < -TREND_DEAD_BAND:
        return "declining"
    return "stable"


def _score_trend(values: Sequence[int]) -> ScoreTrend:
    if not values:
        return ScoreTrend()
    return ScoreTrend(
        current=values[0],
        seven_day_average=round_one_decimal(fmean(values[:ROLLING_WINDOW])),
        trend=_trend(values),
    )


def calculate_symptom_trends(
    entries: Sequence[SymptomEntry], *, panting_frequent_days: int | None = None
) -> SymptomTrends:
    if panting_frequent_days is None:
        panting_frequent_days = get_settings().symptom_panting_frequent_days
    panting_days = sum(1 for entry in entries[:ROLLING_WINDOW] if entry.is_panting)
    return SymptomTrends(
        appetite=_score_trend([entry.appetite for entry in entries]),
        energy=_score_trend([entry.energy_level for entry in entries]),
        panting=PantingTrend(
            recent_days=panting_days,
            is_frequent=panting_days >= panting_frequent_days,
        ),
    )


def analyze_entries(
    entries: Sequence[SymptomEntry],
    *,
    flags: Sequence[SymptomFlag] | None = None,
    panting_frequent_days: int | None = None,
) -> SymptomAnalysis:
    """Build the analysis for entries already collapsed to one per day."""
    if not entries:
        return SymptomAnalysis(data_status="empty")
    if flags is None:
        flags = detect_symptom_flags(entries)
    return SymptomAnalysis(
        flags=list(flags),
        recent_entries=list(entries[:RECENT_ENTRY_COUNT]),
        trends=calculate_symptom_trends(
            entries, panting_frequent_days=panting_frequent_days
        ),
        data_status="ok",
    )


async def analyze_symptoms(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    day_range: int = DEFAULT_DAY_RANGE,
    now: datetime | None = None,
) -> SymptomAnalysis:
    """Symptom analysis for one discharge; store failures yield ``unavailable``."""
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    try:
        records = await store.list_for_discharge(
            discharge_id, since=now - timedelta(days=day_range), until=now
        )
    except RecordStoreError:
        logger.exception("Failed to analyze symptoms for discharge %s", discharge_id)
        return SymptomAnalysis(data_status="unavailable")
    entries = extract_symptom_entries(records)
    logger.debug(
        "Found %s symptom entries for discharge %s", len(entries), discharge_id
    )
    return analyze_entries(entries)


async def get_symptom_flag_count(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> int:
    analysis = await analyze_symptoms(
        store, discharge_id, day_range=FLAG_COUNT_DAY_RANGE, now=now
    )
    return len(analysis.flags)


async def get_symptom_flag_dates(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    day_range: int = DEFAULT_DAY_RANGE,
    now: datetime | None = None,
) -> list[date]:
    analysis = await analyze_symptoms(
        store, discharge_id, day_range=day_range, now=now
    )
    return [flag.date for flag in analysis.flags]


def has_symptom_flags_on_date(flags: Iterable[SymptomFlag], day: date) -> bool:
    return any(flag.date == day for flag in flags)


def get_symptom_flags_for_date(
    flags: Iterable[SymptomFlag], day: date
) -> list[SymptomFlag]:
    return [flag for flag in flags if flag.date == day]


def _format_score(value: float | None) -> str:
    if value is None:
        return "?"
    return f"{value:g}"


def format_symptom_flag(flag: SymptomFlag) -> str:
    """Short line such as ``Jan 2: Low appetite (1/5) for multiple days``."""
    label = f"{flag.date:%b} {flag.date.day}"
    value = _format_score(flag.value)
    previous = _format_score(flag.previous_value)
    if flag.type == "appetite_low":
        return f"{label}: Low appetite ({value}/5) for multiple days"
    if flag.type == "appetite_drop":
        return f"{label}: Appetite dropped from {previous} to {value}"
    if flag.type == "energy_low":
        return f"{label}: Low energy ({value}/5) for multiple days"
    if flag.type == "energy_drop":
        return f"{label}: Energy dropped from {previous} to {value}"
    if flag.type == "panting_persistent":
        return f"{label}: Persistent panting for multiple days"
    return f"{label}: {flag.description}"
