from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, Protocol, Union

from ..common.datetime_utils import to_utc

MonthBuckets = Dict[str, Dict[str, int]]


class _HasGroupAndDate(Protocol):
    group_id: str
    date: Union[date, datetime]


def month_key(value: Union[date, datetime]) -> str:
    """``YYYY-MM`` of the calendar month containing ``value`` (UTC)."""
    if isinstance(value, datetime):
        value = to_utc(value)
    return f"{value.year:04d}-{value.month:02d}"


def month_label(key: str) -> str:
    """Short upper-case month name for a ``YYYY-MM`` key, e.g. ``2024-03`` -> ``MAR``."""
    year, month = key.split("-")
    return date(int(year), int(month), 1).strftime("%b").upper()


def aggregate_by_month(records: Iterable[_HasGroupAndDate]) -> MonthBuckets:
    """Count records per month and per group. Input order does not matter."""
    buckets: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for record in records:
        buckets[month_key(record.date)][record.group_id] += 1
    return {month: dict(counts) for month, counts in buckets.items()}
