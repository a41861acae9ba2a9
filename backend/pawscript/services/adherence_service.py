"""Medication adherence aggregation over dose records logged by the app."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from pawscript.core.timeutils import coerce_utc, utc_date
from pawscript.models.dose_record import DoseStatus
from pawscript.repositories import DoseRecordStore, RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead
from pawscript.schemas.monitoring import (
    AdherenceMetrics,
    AdherenceSummary,
    AdherenceTotals,
    DailyAdherence,
    MedicationAdherence,
)

logger = logging.getLogger(__name__)

LATE_THRESHOLD = timedelta(hours=2)
DEFAULT_DAY_RANGE = 30
RECENT_ACTIVITY_WINDOW = timedelta(days=7)


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_one_decimal(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def is_given(record: DoseRecordRead) -> bool:
    return record.status == DoseStatus.GIVEN


def is_missed(record: DoseRecordRead) -> bool:
    # skipped doses count as missed for adherence
    return record.status in (DoseStatus.MISSED, DoseStatus.SKIPPED)


def is_late(record: DoseRecordRead) -> bool:
    if not is_given(record) or record.given_at is None:
        return False
    return record.given_at - record.scheduled_time > LATE_THRESHOLD


def within_window(
    records: Iterable[DoseRecordRead], *, day_range: int, now: datetime
) -> list[DoseRecordRead]:
    start = now - timedelta(days=day_range)
    return [r for r in records if start <= r.scheduled_time <= now]


def summarize(records: Sequence[DoseRecordRead]) -> AdherenceTotals:
    total = len(records)
    given = sum(1 for r in records if is_given(r))
    return AdherenceTotals(
        total_doses=total,
        given_doses=given,
        late_doses=sum(1 for r in records if is_late(r)),
        missed_doses=sum(1 for r in records if is_missed(r)),
        adherence_rate=percentage(given, total),
    )


def _per_medication(records: Sequence[DoseRecordRead]) -> list[MedicationAdherence]:
    grouped: dict[str, list[DoseRecordRead]] = defaultdict(list)
    for record in records:
        grouped[record.medication_name].append(record)
    rows = []
    for name in sorted(grouped):
        totals = summarize(grouped[name])
        rows.append(
            MedicationAdherence(
                medication_name=name,
                total_doses=totals.total_doses,
                given_doses=totals.given_doses,
                on_time_doses=totals.given_doses - totals.late_doses,
                late_doses=totals.late_doses,
                missed_doses=totals.missed_doses,
                adherence_rate=totals.adherence_rate,
            )
        )
    return rows


def _timeline(records: Sequence[DoseRecordRead]) -> list[DailyAdherence]:
    grouped: dict[date, list[DoseRecordRead]] = defaultdict(list)
    for record in records:
        grouped[utc_date(record.scheduled_time)].append(record)
    timeline = []
    for day in sorted(grouped):
        totals = summarize(grouped[day])
        timeline.append(
            DailyAdherence(
                date=day,
                scheduled_doses=totals.total_doses,
                given_doses=totals.given_doses,
                missed_doses=totals.missed_doses,
                adherence_rate=totals.adherence_rate,
            )
        )
    return timeline


def calculate_adherence(
    records: Iterable[DoseRecordRead],
    *,
    day_range: int = DEFAULT_DAY_RANGE,
    now: datetime | None = None,
) -> AdherenceMetrics:
    """Aggregate records scheduled within the last ``day_range`` days."""
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    in_window = within_window(records, day_range=day_range, now=now)
    if not in_window:
        return AdherenceMetrics(data_status="empty")
    return AdherenceMetrics(
        overall=summarize(in_window),
        per_medication=_per_medication(in_window),
        timeline=_timeline(in_window),
        data_status="ok",
    )


def last_activity(records: Iterable[DoseRecordRead]) -> datetime | None:
    """Most recent ``logged_at`` among ``records``."""
    return max((r.logged_at for r in records), default=None)


def is_recently_active(activity: datetime | None, *, now: datetime) -> bool:
    return activity is not None and now - activity < RECENT_ACTIVITY_WINDOW


async def get_adherence_metrics(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    day_range: int = DEFAULT_DAY_RANGE,
    now: datetime | None = None,
) -> AdherenceMetrics:
    """Adherence for one discharge; store failures yield ``unavailable``."""
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    try:
        records = await store.list_for_discharge(
            discharge_id, since=now - timedelta(days=day_range), until=now
        )
    except RecordStoreError:
        logger.exception("Failed to load dose records for discharge %s", discharge_id)
        return AdherenceMetrics(data_status="unavailable")
    return calculate_adherence(records, day_range=day_range, now=now)


async def get_recent_dose_records(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    limit: int = 50,
) -> list[DoseRecordRead]:
    try:
        return await store.list_for_discharge(discharge_id, limit=limit)
    except RecordStoreError:
        logger.exception(
            "Failed to load recent dose records for discharge %s", discharge_id
        )
        return []


async def get_patient_adherence_summary(
    store: DoseRecordStore,
    discharge_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> AdherenceSummary:
    """30-day adherence rate plus last activity for the patient list."""
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    try:
        records = await store.list_for_discharge(
            discharge_id, since=now - timedelta(days=DEFAULT_DAY_RANGE), until=now
        )
    except RecordStoreError:
        logger.exception(
            "Failed to summarize adherence for discharge %s", discharge_id
        )
        return AdherenceSummary(discharge_id=discharge_id, data_status="unavailable")

    metrics = calculate_adherence(records, now=now)
    activity = last_activity(records)
    return AdherenceSummary(
        discharge_id=discharge_id,
        adherence_rate=metrics.overall.adherence_rate,
        last_activity=activity,
        is_active=is_recently_active(activity, now=now),
        data_status=metrics.data_status,
    )
