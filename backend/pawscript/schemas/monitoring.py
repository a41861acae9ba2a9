"""Derived monitoring views: adherence metrics, symptom analysis, dashboards.

None of these are persisted; they are recomputed from dose records on every
request.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from pawscript.models.pet import PetType

DataStatus = Literal["ok", "empty", "unavailable"]
Severity = Literal["low", "medium", "high"]
TrendDirection = Literal["improving", "stable", "declining"]
AlertLevel = Literal["none", "low", "medium", "high"]
SymptomFlagType = Literal[
    "appetite_low",
    "appetite_drop",
    "energy_low",
    "energy_drop",
    "panting_persistent",
]


class AdherenceTotals(BaseModel):
    total_doses: int = 0
    given_doses: int = 0
    late_doses: int = 0
    missed_doses: int = 0
    adherence_rate: int = 0


class MedicationAdherence(BaseModel):
    medication_name: str
    total_doses: int
    given_doses: int
    on_time_doses: int
    late_doses: int
    missed_doses: int
    adherence_rate: int


class DailyAdherence(BaseModel):
    date: date
    scheduled_doses: int
    given_doses: int
    missed_doses: int
    adherence_rate: int


class AdherenceMetrics(BaseModel):
    """Overall, per-medication and per-day adherence for a set of dose records.

    ``data_status`` separates "no doses logged yet" (``empty``) from a record
    store outage (``unavailable``); both carry zero-valued totals.
    """

    overall: AdherenceTotals = Field(default_factory=AdherenceTotals)
    per_medication: list[MedicationAdherence] = Field(default_factory=list)
    timeline: list[DailyAdherence] = Field(default_factory=list)
    data_status: DataStatus = "empty"


class AdherenceSummary(BaseModel):
    """Headline adherence figures for a single discharge."""

    discharge_id: uuid.UUID
    adherence_rate: int = 0
    last_activity: datetime | None = None
    is_active: bool = False
    data_status: DataStatus = "empty"


class SymptomEntry(BaseModel):
    """One owner check-in per calendar day."""

    date: date
    appetite: int
    energy_level: int
    is_panting: bool
    notes: str | None = None
    recorded_at: datetime
    discharge_id: uuid.UUID | None = None
    medication_name: str | None = None


class SymptomFlag(BaseModel):
    type: SymptomFlagType
    date: date
    description: str
    severity: Severity
    value: float | None = None
    previous_value: float | None = None
    discharge_id: uuid.UUID | None = None


class ScoreTrend(BaseModel):
    current: int = 0
    seven_day_average: float = 0
    trend: TrendDirection = "stable"


class PantingTrend(BaseModel):
    recent_days: int = 0
    is_frequent: bool = False


class SymptomTrends(BaseModel):
    appetite: ScoreTrend = Field(default_factory=ScoreTrend)
    energy: ScoreTrend = Field(default_factory=ScoreTrend)
    panting: PantingTrend = Field(default_factory=PantingTrend)


class SymptomAnalysis(BaseModel):
    flags: list[SymptomFlag] = Field(default_factory=list)
    recent_entries: list[SymptomEntry] = Field(default_factory=list)
    trends: SymptomTrends = Field(default_factory=SymptomTrends)
    data_status: DataStatus = "empty"


class EpisodeAdherence(BaseModel):
    """Adherence for one discharge inside a pet's history."""

    discharge_id: uuid.UUID
    created_at: datetime
    is_active: bool
    total_doses: int
    given_doses: int
    adherence_rate: int
    data_status: DataStatus = "ok"


class LastGivenDose(BaseModel):
    discharge_id: uuid.UUID
    medication_name: str
    given_at: datetime


class PetAdherenceReport(BaseModel):
    """Adherence across every discharge recorded for one pet."""

    pet_id: uuid.UUID
    aggregated: AdherenceMetrics = Field(default_factory=AdherenceMetrics)
    active_only: AdherenceTotals = Field(default_factory=AdherenceTotals)
    per_episode: list[EpisodeAdherence] = Field(default_factory=list)
    last_given_dose: LastGivenDose | None = None
    last_activity: datetime | None = None
    is_active: bool = False


class PetSymptomReport(BaseModel):
    """Symptom analysis merged across every discharge recorded for one pet."""

    pet_id: uuid.UUID
    analysis: SymptomAnalysis = Field(default_factory=SymptomAnalysis)
    entries: list[SymptomEntry] = Field(default_factory=list)
    flag_count: int = 0


class PetOverview(BaseModel):
    """Quick-glance figures for the patient detail header."""

    pet_id: uuid.UUID
    pet_name: str
    pet_species: PetType
    pet_weight: str | None = None
    overall_adherence_rate: int = 0
    active_only_adherence_rate: int = 0
    active_meds_count: int = 0
    archived_meds_count: int = 0
    missed_dose_count: int = 0
    late_dose_count: int = 0
    last_dose_given_at: datetime | None = None
    current_status: Literal["active", "inactive"] = "inactive"
    recent_symptom_alerts: int = 0
    total_visits: int = 0
    last_visit_date: datetime | None = None
    data_status: DataStatus = "empty"


class PatientSummary(BaseModel):
    """One row of the clinic's patient list."""

    discharge_id: uuid.UUID
    pet_id: uuid.UUID
    pet_name: str
    pet_species: PetType
    client_name: str
    client_email: str | None = None
    created_at: datetime
    medication_count: int
    adherence_rate: int
    last_activity: datetime | None = None
    is_active: bool
    alert_level: AlertLevel


class TimelineEvent(BaseModel):
    """A dose event or symptom alert on a discharge's timeline."""

    id: str
    type: Literal["dose", "symptom_flag"]
    date: date
    title: str
    description: str
    severity: Severity = "low"
    delay_hours: int | None = None
    medication_name: str | None = None
    discharge_id: uuid.UUID | None = None
    sort_time: datetime
