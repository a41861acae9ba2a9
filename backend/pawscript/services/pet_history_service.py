"""Cross-visit views of a pet: adherence, symptoms and the quick-glance header."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Sequence

from pawscript.core.config import get_settings
from pawscript.core.timeutils import coerce_utc, utc_date
from pawscript.models.discharge import Discharge
from pawscript.models.pet import Pet
from pawscript.repositories import DischargeStore, DoseRecordStore, RecordStoreError
from pawscript.schemas.dose_record import DoseRecordRead
from pawscript.schemas.monitoring import (
    AdherenceMetrics,
    EpisodeAdherence,
    LastGivenDose,
    PetAdherenceReport,
    PetOverview,
    PetSymptomReport,
    SymptomAnalysis,
    SymptomEntry,
    SymptomFlag,
)
from pawscript.services import adherence_service, medication_activity, symptom_flag_service

logger = logging.getLogger(__name__)

ACTIVE_ONLY_DAY_RANGE = 30
OVERVIEW_DAY_RANGE = 30
RECENT_ALERT_DAYS = 14

_SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2}


@dataclass(slots=True)
class EpisodeRecords:
    """Dose records fetched for one discharge of a pet."""

    discharge: Discharge
    records: list[DoseRecordRead] = field(default_factory=list)
    available: bool = True


async def _load_discharges(
    discharges: DischargeStore, pet_id: uuid.UUID, clinic_id: uuid.UUID
) -> list[Discharge] | None:
    try:
        return list(await discharges.list_for_pet(pet_id, clinic_id=clinic_id))
    except RecordStoreError:
        logger.exception("Failed to load discharges for pet %s", pet_id)
        return None


async def load_episode_records(
    store: DoseRecordStore,
    discharges: Sequence[Discharge],
    *,
    day_range: int,
    now: datetime,
) -> list[EpisodeRecords]:
    """Fetch each discharge's records in turn; a failed fetch leaves it empty."""
    since = now - timedelta(days=day_range)
    episodes = []
    for discharge in discharges:
        try:
            records = await store.list_for_discharge(
                discharge.id, since=since, until=now
            )
        except RecordStoreError:
            logger.exception(
                "Failed to load dose records for discharge %s", discharge.id
            )
            episodes.append(EpisodeRecords(discharge=discharge, available=False))
            continue
        episodes.append(EpisodeRecords(discharge=discharge, records=records))
    return episodes


def active_only_records(
    episodes: Sequence[EpisodeRecords], *, now: datetime
) -> list[DoseRecordRead]:
    """Records of still-running medications scheduled in the last 30 days.

    Records that match no prescribed medication are left out.
    """
    reference = utc_date(now)
    since = now - timedelta(days=ACTIVE_ONLY_DAY_RANGE)
    selected = []
    for episode in episodes:
        for record in episode.records:
            if record.scheduled_time < since:
                continue
            medication = medication_activity.match_medication(episode.discharge, record)
            if medication is None:
                continue
            if medication_activity.is_medication_active(
                medication, episode.discharge, reference
            ):
                selected.append(record)
    return selected


def calculate_pet_adherence(
    pet_id: uuid.UUID,
    episodes: Sequence[EpisodeRecords],
    *,
    day_range: int,
    now: datetime,
) -> PetAdherenceReport:
    reference = utc_date(now)
    all_records = [record for episode in episodes for record in episode.records]
    aggregated = adherence_service.calculate_adherence(
        all_records, day_range=day_range, now=now
    )
    if not all_records and episodes and not any(e.available for e in episodes):
        aggregated = AdherenceMetrics(data_status="unavailable")

    per_episode = []
    for episode in episodes:
        totals = adherence_service.summarize(episode.records)
        per_episode.append(
            EpisodeAdherence(
                discharge_id=episode.discharge.id,
                created_at=episode.discharge.created_at,
                is_active=medication_activity.is_discharge_active(
                    episode.discharge, reference
                ),
                total_doses=totals.total_doses,
                given_doses=totals.given_doses,
                adherence_rate=totals.adherence_rate,
                data_status=(
                    "unavailable"
                    if not episode.available
                    else "ok" if episode.records else "empty"
                ),
            )
        )

    last_given: LastGivenDose | None = None
    for episode in episodes:
        for record in episode.records:
            if record.given_at is None:
                continue
            if last_given is None or record.given_at > last_given.given_at:
                last_given = LastGivenDose(
                    discharge_id=episode.discharge.id,
                    medication_name=record.medication_name,
                    given_at=record.given_at,
                )

    activity = adherence_service.last_activity(all_records)
    return PetAdherenceReport(
        pet_id=pet_id,
        aggregated=aggregated,
        active_only=adherence_service.summarize(
            active_only_records(episodes, now=now)
        ),
        per_episode=per_episode,
        last_given_dose=last_given,
        last_activity=activity,
        is_active=adherence_service.is_recently_active(activity, now=now),
    )


def _one_flag_per_day(
    flags: Sequence[SymptomFlag], merged: Sequence[SymptomEntry]
) -> list[SymptomFlag]:
    """Collapse overlapping visits to one flag per type and date.

    The more severe flag wins; on a tie, the flag from the visit whose
    check-in was kept for that day.
    """
    winners = {entry.date: entry.discharge_id for entry in merged}
    kept: dict[tuple[str, date], SymptomFlag] = {}
    for flag in flags:
        key = (flag.type, flag.date)
        rank = (
            _SEVERITY_RANK[flag.severity],
            flag.discharge_id == winners.get(flag.date),
        )
        current = kept.get(key)
        if current is None or rank > (
            _SEVERITY_RANK[current.severity],
            current.discharge_id == winners.get(current.date),
        ):
            kept[key] = flag
    return sorted(kept.values(), key=lambda flag: flag.date, reverse=True)


def calculate_pet_symptoms(
    pet_id: uuid.UUID,
    episodes: Sequence[EpisodeRecords],
    *,
    panting_frequent_days: int | None = None,
) -> PetSymptomReport:
    """Flag each discharge on its own, then merge entries and flags."""
    entry_sets = []
    flags: list[SymptomFlag] = []
    for episode in episodes:
        entries = symptom_flag_service.extract_symptom_entries(episode.records)
        entry_sets.append(entries)
        flags.extend(
            flag.model_copy(update={"discharge_id": episode.discharge.id})
            for flag in symptom_flag_service.detect_symptom_flags(entries)
        )
    merged = symptom_flag_service.merge_symptom_entries(entry_sets)
    flags = _one_flag_per_day(flags, merged)

    if merged:
        analysis = symptom_flag_service.analyze_entries(
            merged, flags=flags, panting_frequent_days=panting_frequent_days
        )
    elif episodes and not any(e.available for e in episodes):
        analysis = SymptomAnalysis(data_status="unavailable")
    else:
        analysis = SymptomAnalysis(data_status="empty")
    return PetSymptomReport(
        pet_id=pet_id, analysis=analysis, entries=merged, flag_count=len(flags)
    )


def _resolve(now: datetime | None, day_range: int | None) -> tuple[datetime, int]:
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    if day_range is None:
        day_range = get_settings().pet_history_day_range
    return now, day_range


async def get_pet_adherence(
    store: DoseRecordStore,
    discharges: DischargeStore,
    *,
    pet_id: uuid.UUID,
    clinic_id: uuid.UUID,
    day_range: int | None = None,
    now: datetime | None = None,
) -> PetAdherenceReport:
    now, day_range = _resolve(now, day_range)
    pet_discharges = await _load_discharges(discharges, pet_id, clinic_id)
    if pet_discharges is None:
        return PetAdherenceReport(
            pet_id=pet_id, aggregated=AdherenceMetrics(data_status="unavailable")
        )
    episodes = await load_episode_records(
        store, pet_discharges, day_range=day_range, now=now
    )
    return calculate_pet_adherence(pet_id, episodes, day_range=day_range, now=now)


async def get_pet_symptoms(
    store: DoseRecordStore,
    discharges: DischargeStore,
    *,
    pet_id: uuid.UUID,
    clinic_id: uuid.UUID,
    day_range: int | None = None,
    now: datetime | None = None,
) -> PetSymptomReport:
    now, day_range = _resolve(now, day_range)
    pet_discharges = await _load_discharges(discharges, pet_id, clinic_id)
    if pet_discharges is None:
        return PetSymptomReport(
            pet_id=pet_id, analysis=SymptomAnalysis(data_status="unavailable")
        )
    episodes = await load_episode_records(
        store, pet_discharges, day_range=day_range, now=now
    )
    return calculate_pet_symptoms(pet_id, episodes)


def build_pet_overview(
    pet: Pet,
    episodes: Sequence[EpisodeRecords],
    *,
    now: datetime,
) -> PetOverview:
    """Quick-glance figures over the last 30 days of a pet's history."""
    reference = utc_date(now)
    discharges = [episode.discharge for episode in episodes]
    adherence = calculate_pet_adherence(
        pet.id, episodes, day_range=OVERVIEW_DAY_RANGE, now=now
    )
    symptoms = calculate_pet_symptoms(pet.id, episodes)
    alert_since = reference - timedelta(days=RECENT_ALERT_DAYS)
    active_meds, archived_meds = medication_activity.count_medications(
        discharges, reference
    )
    latest = discharges[0] if discharges else None
    visit_dates = [coerce_utc(d.visit_date or d.created_at) for d in discharges]
    is_active = any(
        medication_activity.is_discharge_active(d, reference) for d in discharges
    )
    return PetOverview(
        pet_id=pet.id,
        pet_name=pet.name,
        pet_species=pet.species,
        pet_weight=latest.pet_weight if latest is not None else pet.weight,
        overall_adherence_rate=adherence.aggregated.overall.adherence_rate,
        active_only_adherence_rate=adherence.active_only.adherence_rate,
        active_meds_count=active_meds,
        archived_meds_count=archived_meds,
        missed_dose_count=adherence.aggregated.overall.missed_doses,
        late_dose_count=adherence.aggregated.overall.late_doses,
        last_dose_given_at=(
            adherence.last_given_dose.given_at
            if adherence.last_given_dose is not None
            else None
        ),
        current_status="active" if is_active else "inactive",
        recent_symptom_alerts=sum(
            1 for flag in symptoms.analysis.flags if flag.date >= alert_since
        ),
        total_visits=len(discharges),
        last_visit_date=max(visit_dates, default=None),
        data_status=adherence.aggregated.data_status,
    )


async def get_pet_overview(
    store: DoseRecordStore,
    discharges: DischargeStore,
    *,
    pet: Pet,
    now: datetime | None = None,
) -> PetOverview:
    now = coerce_utc(now) if now is not None else datetime.now(UTC)
    pet_discharges = await _load_discharges(discharges, pet.id, pet.clinic_id)
    if pet_discharges is None:
        return PetOverview(
            pet_id=pet.id,
            pet_name=pet.name,
            pet_species=pet.species,
            pet_weight=pet.weight,
            data_status="unavailable",
        )
    episodes = await load_episode_records(
        store, pet_discharges, day_range=OVERVIEW_DAY_RANGE, now=now
    )
    return build_pet_overview(pet, episodes, now=now)
