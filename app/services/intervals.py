"""Half-open interval helpers shared by conflict detection and slot search."""

from __future__ import annotations

from datetime import datetime


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Return True if [a_start, a_end) and [b_start, b_end) intersect.

    Touching boundaries (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def contains(
    outer_start: datetime, outer_end: datetime, start: datetime, end: datetime
) -> bool:
    """Return True if [start, end) lies entirely inside [outer_start, outer_end]."""
    return outer_start <= start and end <= outer_end
