"""Logging filters that scrub credentials from log output."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|access_token\"\s*:\s*\"[^\"]+\""
    r"|password\"\s*:\s*\"[^\"]+\""
    r"|password=[^&\s]+)",
    re.IGNORECASE,
)

REDACTED = "**REDACTED**"


class SensitiveFilter(logging.Filter):
    """Replace bearer tokens and passwords in log messages with a marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _SENSITIVE_PATTERN.sub(REDACTED, record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                _SENSITIVE_PATTERN.sub(REDACTED, arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


__all__ = ["REDACTED", "SensitiveFilter"]
