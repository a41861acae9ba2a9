"""Pydantic schemas for pet profiles."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from pawscript.models.pet import PetType


class PetBase(BaseModel):
    """Shared pet fields."""

    client_id: uuid.UUID
    name: str = Field(min_length=1, max_length=120)
    species: PetType
    breed: str | None = None
    weight: str | None = None
    date_of_birth: date | None = None
    microchip_number: str | None = None
    notes: str | None = None


class PetCreate(PetBase):
    """Payload for creating a pet."""

    pass


class PetUpdate(BaseModel):
    """Mutable pet fields."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    species: PetType | None = None
    breed: str | None = None
    weight: str | None = None
    date_of_birth: date | None = None
    microchip_number: str | None = None
    notes: str | None = None
    is_active: bool | None = None


class PetRead(PetBase):
    """Serialized pet representation."""

    id: uuid.UUID
    clinic_id: uuid.UUID
    external_id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
