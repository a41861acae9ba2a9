"""Dose record schemas shared by the ingest API and the aggregation services."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from pawscript.core.timeutils import coerce_utc
from pawscript.models.dose_record import DoseStatus


class SymptomSnapshot(BaseModel):
    """Owner-reported symptom check-in attached to a dose log."""

    appetite: int = Field(ge=1, le=5)
    energy_level: int = Field(ge=1, le=5)
    is_panting: bool = False
    notes: str | None = Field(default=None, max_length=1024)
    recorded_at: datetime

    @field_validator("recorded_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return coerce_utc(value)


class _DoseRecordFields(BaseModel):
    medication_id: str | None = None
    medication_name: str = Field(min_length=1, max_length=255)
    scheduled_time: datetime
    given_at: datetime | None = None
    status: DoseStatus
    dosage: str = ""
    frequency: float = Field(default=1, gt=0)
    instructions: str = ""
    symptoms: SymptomSnapshot | None = None

    @field_validator("scheduled_time", "given_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return coerce_utc(value) if value is not None else None


class DoseRecordCreate(_DoseRecordFields):
    """Payload posted by the mobile app when a dose event is logged."""

    logged_at: datetime | None = None

    @field_validator("logged_at")
    @classmethod
    def _utc_logged(cls, value: datetime | None) -> datetime | None:
        return coerce_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _given_at_matches_status(self) -> "DoseRecordCreate":
        if self.status == DoseStatus.GIVEN and self.given_at is None:
            raise ValueError("given_at is required when status is 'given'")
        if self.status != DoseStatus.GIVEN and self.given_at is not None:
            raise ValueError("given_at is only allowed when status is 'given'")
        return self


class DoseRecordRead(_DoseRecordFields):
    """A stored dose record, as consumed by the aggregator and flag engine."""

    id: uuid.UUID
    discharge_id: uuid.UUID
    logged_at: datetime

    @field_validator("logged_at")
    @classmethod
    def _utc_logged(cls, value: datetime) -> datetime:
        return coerce_utc(value)
