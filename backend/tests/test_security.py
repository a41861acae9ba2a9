"""Identifier helpers and log scrubbing."""

from __future__ import annotations

import logging

from pawscript.core.ids import (
    extract_uuid_from_med_id,
    extract_uuid_from_pet_id,
    generate_med_id,
    generate_pet_id,
    is_valid_med_id,
    is_valid_pet_id,
)
from pawscript.security.logging_filters import REDACTED, SensitiveFilter


def test_generated_ids_round_trip() -> None:
    pet_id = generate_pet_id()
    med_id = generate_med_id()
    assert is_valid_pet_id(pet_id)
    assert is_valid_med_id(med_id)
    assert not is_valid_pet_id(med_id)
    assert extract_uuid_from_pet_id(pet_id) == pet_id[len("pet_") :]
    assert extract_uuid_from_med_id(med_id) == med_id[len("med_") :]


def test_malformed_ids_are_rejected() -> None:
    assert not is_valid_pet_id("pet_123")
    assert not is_valid_pet_id(None)
    assert extract_uuid_from_pet_id("bella") is None
    assert extract_uuid_from_med_id("med_not-a-uuid") is None


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_filter_scrubs_tokens_and_passwords() -> None:
    record = _record("Authorization: Bearer abc.def.ghi sent with password=hunter2")
    assert SensitiveFilter().filter(record)
    assert "abc.def.ghi" not in record.msg
    assert "hunter2" not in record.msg
    assert REDACTED in record.msg

    with_args = _record("payload %s", '{"password": "hunter2"}')
    SensitiveFilter().filter(with_args)
    assert "hunter2" not in with_args.getMessage()
