"""Discharge summary schemas: episodes, medications and taper stages."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pawscript.models.pet import PetType

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_times(value: list[str]) -> list[str]:
    for item in value:
        if not _TIME_RE.match(item):
            raise ValueError(f"Invalid administration time {item!r}; expected HH:MM")
    return value


class TaperStageCreate(BaseModel):
    """One step of a tapered schedule."""

    start_date: date
    end_date: date
    dosage: str = Field(min_length=1, max_length=120)
    frequency: float = Field(gt=0, le=24)
    times: list[str] = Field(default_factory=list)
    total_doses: int | None = Field(default=None, gt=0)
    is_every_other_day: bool = False

    _check_times = field_validator("times")(_validate_times)

    @model_validator(mode="after")
    def _check_range(self) -> "TaperStageCreate":
        if self.end_date < self.start_date:
            raise ValueError("Taper stage end_date must be on or after start_date")
        return self


class MedicationCreate(BaseModel):
    """A prescribed drug; exactly one of the simple fields or taper stages is used."""

    name: str = Field(min_length=1, max_length=255)
    is_tapered: bool = False
    dosage: str | None = Field(default=None, max_length=120)
    frequency: float | None = Field(default=None, gt=0, le=24)
    times: list[str] = Field(default_factory=list)
    start_date: date | None = None
    end_date: date | None = None
    total_doses: int | None = Field(default=None, gt=0)
    is_every_other_day: bool = False
    instructions: str = ""
    allow_client_to_adjust_time: bool = False
    taper_stages: list[TaperStageCreate] = Field(default_factory=list)

    _check_times = field_validator("times")(_validate_times)

    @model_validator(mode="after")
    def _check_schedule_shape(self) -> "MedicationCreate":
        if self.is_tapered:
            if not self.taper_stages:
                raise ValueError("Tapered medications require at least one taper stage")
            simple = (self.dosage, self.frequency, self.start_date, self.end_date)
            if any(value is not None for value in simple) or self.times:
                raise ValueError(
                    "Tapered medications define dosage and dates per taper stage"
                )
        else:
            if self.taper_stages:
                raise ValueError("Only tapered medications may define taper stages")
            if not self.dosage or self.frequency is None:
                raise ValueError("Non-tapered medications require dosage and frequency")
            if (
                self.is_every_other_day
                and self.total_doses is None
                and self.end_date is None
            ):
                raise ValueError(
                    "Every-other-day medications require total_doses or end_date"
                )
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise ValueError("Medication end_date must be on or after start_date")
        return self


class DischargeCreate(BaseModel):
    """Payload for authoring a discharge summary."""

    pet_id: uuid.UUID
    pet_weight: str | None = None
    diagnosis: str | None = Field(default=None, max_length=512)
    notes: str | None = Field(default=None, max_length=4096)
    visit_date: datetime | None = None
    medications: list[MedicationCreate] = Field(min_length=1)


class TaperStageRead(BaseModel):
    start_date: date
    end_date: date
    dosage: str
    frequency: float
    times: list[str]
    total_doses: int | None = None
    is_every_other_day: bool

    model_config = ConfigDict(from_attributes=True)


class MedicationRead(BaseModel):
    """Serialized prescribed medication."""

    med_id: str
    name: str
    is_tapered: bool
    dosage: str | None = None
    frequency: float | None = None
    times: list[str]
    start_date: date | None = None
    end_date: date | None = None
    total_doses: int | None = None
    is_every_other_day: bool
    instructions: str
    allow_client_to_adjust_time: bool
    taper_stages: list[TaperStageRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PetDescriptor(BaseModel):
    name: str
    species: PetType
    weight: str | None = None


class DischargeRead(BaseModel):
    """Serialized discharge summary."""

    id: uuid.UUID
    clinic_id: uuid.UUID
    pet_id: uuid.UUID
    vet_id: uuid.UUID | None = None
    pet: PetDescriptor
    diagnosis: str | None = None
    notes: str | None = None
    visit_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    medications: list[MedicationRead]

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _pet_descriptor(cls, data: object) -> object:
        # ORM rows carry the snapshot in flat pet_* columns
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "clinic_id": data.clinic_id,
            "pet_id": data.pet_id,
            "vet_id": data.vet_id,
            "pet": {
                "name": data.pet_name,
                "species": data.pet_species,
                "weight": data.pet_weight,
            },
            "diagnosis": data.diagnosis,
            "notes": data.notes,
            "visit_date": data.visit_date,
            "created_at": data.created_at,
            "updated_at": data.updated_at,
            "medications": [
                MedicationRead.model_validate(medication)
                for medication in data.medications
            ],
        }
