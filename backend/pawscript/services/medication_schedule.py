"""Course-length helpers used when authoring medications."""

from __future__ import annotations

import math
from datetime import date, timedelta


def calculate_end_date(start_date: date | None, total_doses: int | None) -> date | None:
    """Last dose date of an every-other-day course of ``total_doses`` doses."""
    if start_date is None or not total_doses or total_doses <= 0:
        return None
    return start_date + timedelta(days=(total_doses - 1) * 2)


def calculate_total_doses(
    start_date: date | None,
    end_date: date | None,
    frequency: float | None,
    is_every_other_day: bool = False,
) -> int | None:
    """Number of doses between two dates, both inclusive."""
    if start_date is None or end_date is None or not frequency:
        return None
    days = (end_date - start_date).days + 1
    if days <= 0:
        return None
    if is_every_other_day:
        return math.ceil(days / 2)
    return math.ceil(days * frequency)
