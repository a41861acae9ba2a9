"""Prefixed identifiers shared with the companion mobile app.

Pets and prescribed medications carry a stable, prefixed identifier
(``pet_<uuid4>`` / ``med_<uuid4>``) so dose logs written by the app can be
joined back to the record that created them across visits.
"""

from __future__ import annotations

import re
import uuid

PET_ID_PREFIX = "pet_"
MED_ID_PREFIX = "med_"

_UUID4 = r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"
_PET_ID_RE = re.compile(rf"^{PET_ID_PREFIX}{_UUID4}$", re.IGNORECASE)
_MED_ID_RE = re.compile(rf"^{MED_ID_PREFIX}{_UUID4}$", re.IGNORECASE)


def generate_pet_id() -> str:
    return f"{PET_ID_PREFIX}{uuid.uuid4()}"


def generate_med_id() -> str:
    return f"{MED_ID_PREFIX}{uuid.uuid4()}"


def is_valid_pet_id(value: object) -> bool:
    return isinstance(value, str) and bool(_PET_ID_RE.match(value))


def is_valid_med_id(value: object) -> bool:
    return isinstance(value, str) and bool(_MED_ID_RE.match(value))


def extract_uuid_from_pet_id(pet_id: str) -> str | None:
    """Return the UUID portion of a pet id, or ``None`` when malformed."""
    if not is_valid_pet_id(pet_id):
        return None
    return pet_id[len(PET_ID_PREFIX) :]


def extract_uuid_from_med_id(med_id: str) -> str | None:
    """Return the UUID portion of a medication id, or ``None`` when malformed."""
    if not is_valid_med_id(med_id):
        return None
    return med_id[len(MED_ID_PREFIX) :]


__all__ = [
    "MED_ID_PREFIX",
    "PET_ID_PREFIX",
    "extract_uuid_from_med_id",
    "extract_uuid_from_pet_id",
    "generate_med_id",
    "generate_pet_id",
    "is_valid_med_id",
    "is_valid_pet_id",
]
