"""Common veterinary drugs with default owner instructions."""

from __future__ import annotations

from pawscript.schemas.medication_template import FrequencyOption, MedicationTemplate

MEDICATION_TEMPLATES: tuple[MedicationTemplate, ...] = (
    MedicationTemplate(
        name="Carprofen",
        default_instructions="Give with food. Monitor for GI upset.",
    ),
    MedicationTemplate(
        name="Prednisone",
        default_instructions=(
            "Give in the morning. Do not stop suddenly without vet guidance."
        ),
    ),
    MedicationTemplate(
        name="Metacam",
        default_instructions=(
            "Give with food. Monitor for decreased appetite or vomiting."
        ),
    ),
    MedicationTemplate(
        name="Tramadol",
        default_instructions="May cause drowsiness. Give with or without food.",
    ),
    MedicationTemplate(
        name="Cephalexin",
        default_instructions=(
            "Complete entire course even if symptoms improve. Give with food."
        ),
    ),
    MedicationTemplate(
        name="Gabapentin",
        default_instructions="May cause sedation initially. Do not stop suddenly.",
    ),
    MedicationTemplate(
        name="Onsior",
        default_instructions="Give with food. Monitor for decreased appetite.",
    ),
    MedicationTemplate(
        name="Rimadyl",
        default_instructions=(
            "Give with food. Watch for loss of appetite, vomiting, or diarrhea."
        ),
    ),
    MedicationTemplate(
        name="Methocarbamol",
        default_instructions="May cause drowsiness. Give with or without food.",
    ),
    MedicationTemplate(
        name="Amoxicillin",
        default_instructions="Complete entire course. Give with or without food.",
    ),
)

FREQUENCY_OPTIONS: tuple[FrequencyOption, ...] = (
    FrequencyOption(
        abbreviation="SID",
        label="SID - Once daily",
        doses_per_day=1,
        times=["08:00"],
        category="common",
    ),
    FrequencyOption(
        abbreviation="BID",
        label="BID - Twice daily",
        doses_per_day=2,
        times=["08:00", "20:00"],
        category="common",
    ),
    FrequencyOption(
        abbreviation="TID",
        label="TID - Three times daily",
        doses_per_day=3,
        times=["08:00", "14:00", "20:00"],
        category="common",
    ),
    FrequencyOption(
        abbreviation="QID",
        label="QID - Four times daily",
        doses_per_day=4,
        times=["08:00", "12:00", "16:00", "20:00"],
        category="common",
    ),
    FrequencyOption(
        abbreviation="EOD",
        label="EOD - Every other day",
        doses_per_day=0.5,
        times=["08:00"],
        category="other",
    ),
    FrequencyOption(
        abbreviation="PRN",
        label="PRN - As needed",
        doses_per_day=None,
        times=[],
        category="other",
    ),
    FrequencyOption(
        abbreviation="q8h",
        label="q8h - Every 8 hours",
        doses_per_day=3,
        times=["08:00", "16:00", "00:00"],
        category="other",
    ),
    FrequencyOption(
        abbreviation="q12h",
        label="q12h - Every 12 hours",
        doses_per_day=2,
        times=["08:00", "20:00"],
        category="other",
    ),
    FrequencyOption(
        abbreviation="Custom",
        label="Custom - Enter manually",
        doses_per_day=None,
        times=[],
        category="other",
    ),
)


def get_medication_template(name: str) -> MedicationTemplate | None:
    """Case-insensitive lookup by drug name."""
    needle = name.strip().lower()
    for template in MEDICATION_TEMPLATES:
        if template.name.lower() == needle:
            return template
    return None


def get_frequency_option(abbreviation: str) -> FrequencyOption | None:
    for option in FREQUENCY_OPTIONS:
        if option.abbreviation.lower() == abbreviation.strip().lower():
            return option
    return None
