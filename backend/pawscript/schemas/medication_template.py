"""Read-only medication catalogue schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class MedicationTemplate(BaseModel):
    name: str
    default_instructions: str


class FrequencyOption(BaseModel):
    """A dosing frequency offered when prescribing.

    ``doses_per_day`` is ``None`` for as-needed and free-form schedules.
    """

    abbreviation: str
    label: str
    doses_per_day: float | None
    times: list[str]
    category: Literal["common", "other"]


class MedicationCatalog(BaseModel):
    templates: list[MedicationTemplate]
    frequencies: list[FrequencyOption]
