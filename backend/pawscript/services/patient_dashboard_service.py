"""Clinic patient list and per-discharge activity timeline."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from pawscript.core.timeutils import coerce_utc, utc_date
from pawscript.models.discharge import Discharge
from pawscript.models.dose_record import DoseStatus
from pawscript.repositories import DischargeStore, DoseRecordStore, RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead
from pawscript.schemas.monitoring import (
    AlertLevel,
    PatientSummary,
    Severity,
    SymptomAnalysis,
    TimelineEvent,
)
from pawscript.services import adherence_service

logger = logging.getLogger(__name__)

IDLE_ALERT_DAYS = 7
LATE_WARNING_HOURS = 2
LATE_ALERT_HOURS = 6

_DOSE_TITLES = {
    DoseStatus.GIVEN: "Dose Given",
    DoseStatus.MISSED: "Dose Missed",
    DoseStatus.SKIPPED: "Dose Skipped",
}


def calculate_alert_level(
    adherence_rate: int, days_since_last_activity: float | None
) -> AlertLevel:
    """Priority shown on the patient list."""
    if days_since_last_activity is not None and days_since_last_activity > IDLE_ALERT_DAYS:
        return "high"
    if adherence_rate < 50:
        return "high"
    if adherence_rate < 70:
        return "medium"
    if adherence_rate < 85:
        return "low"
    return "none"


def delay_hours(record: DoseRecordRead) -> int:
    """Hours between the scheduled and actual administration, rounded."""
    if record.given_at is None:
        return 0
    hours = Decimal(str((record.given_at - record.scheduled_time).total_seconds())) / 3600
    return int(hours.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _dose_event(record: DoseRecordRead) -> TimelineEvent:
    delay = 0
    severity: Severity = "low"
    description = f"{record.dosage} of {record.medication_name}".strip()
    if record.status == DoseStatus.GIVEN:
        delay = delay_hours(record)
        if delay > LATE_ALERT_HOURS:
            severity = "high"
        elif delay > LATE_WARNING_HOURS:
            severity = "medium"
        if delay > LATE_WARNING_HOURS:
            description = f"{description} ({delay}h late)"
    else:
        severity = "high"
    return TimelineEvent(
        id=str(record.id),
        type="dose",
        date=utc_date(record.scheduled_time),
        title=_DOSE_TITLES[record.status],
        description=description,
        severity=severity,
        delay_hours=delay,
        medication_name=record.medication_name,
        discharge_id=record.discharge_id,
        sort_time=record.given_at or record.scheduled_time,
    )


def build_timeline_events(
    records: Iterable[DoseRecordRead],
    analysis: SymptomAnalysis,
    *,
    discharge_id: uuid.UUID | None = None,
) -> list[TimelineEvent]:
    """Dose events and symptom alerts, most recent first."""
    events = [_dose_event(record) for record in records]
    for flag in analysis.flags:
        events.append(
            TimelineEvent(
                id=f"symptom-{flag.type}-{flag.date.isoformat()}",
                type="symptom_flag",
                date=flag.date,
                title="Symptom Alert",
                description=flag.description,
                severity=flag.severity,
                discharge_id=flag.discharge_id or discharge_id,
                sort_time=datetime(
                    flag.date.year, flag.date.month, flag.date.day, tzinfo=UTC
                ),
            )
        )
    events.sort(key=lambda event: event.sort_time, reverse=True)
    return events


def _days_since(activity: datetime | None, now: datetime) -> float | None:
    if activity is None:
        return None
    return (now - activity) / timedelta(days=1)


async def summarize_discharge(
    store: DoseRecordStore,
    discharge: Discharge,
    *,
    now: datetime,
) -> PatientSummary:
    summary = await adherence_service.get_patient_adherence_summary(
        store, discharge.id, now=now
    )
    client = discharge.pet.client
    return PatientSummary(
        discharge_id=discharge.id,
        pet_id=discharge.pet_id,
        pet_name=discharge.pet_name,
        pet_species=discharge.pet_species,
        client_name=client.full_name,
        client_email=client.email,
        created_at=discharge.created_at,
        medication_count=len(discharge.medications),
        adherence_rate=summary.adherence_rate,
        last_activity=summary.last_activity,
        is_active=summary.is_active,
        alert_level=calculate_alert_level(
            summary.adherence_rate, _days_since(summary.last_activity, now)
        ),
    )


def _matches(summary: PatientSummary, search: str) -> bool:
    needle = search.lower()
    return needle in summary.pet_name.lower() or needle in summary.client_name.lower()


async def list_patient_summaries(
    store: DoseRecordStore,
    discharges: DischargeStore,
    *,
    clinic_id: uuid.UUID,
    is_active: bool | None = None,
    alert_level: AlertLevel | None = None,
    search: str | None = None,
    now: datetime | None = None,
) -> Sequence[PatientSummary]:
    """One row per discharge, newest first."""
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    try:
        clinic_discharges = await discharges.list_for_clinic(clinic_id)
    except RecordStoreError:
        logger.exception("Failed to load discharges for clinic %s", clinic_id)
        return []

    summaries = []
    for discharge in clinic_discharges:
        summary = await summarize_discharge(store, discharge, now=now)
        if is_active is not None and summary.is_active != is_active:
            continue
        if alert_level is not None and summary.alert_level != alert_level:
            continue
        if search and not _matches(summary, search):
            continue
        summaries.append(summary)
    return summaries
