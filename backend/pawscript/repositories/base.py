"""Shared repository errors."""

from __future__ import annotations


class RecordStoreError(RuntimeError):
    """Raised when the backing store cannot be read."""
