from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .model import GroupAttendance

_TWO_PLACES = Decimal("0.01")


def count_groups_with_attendance(groups: Iterable[GroupAttendance]) -> int:
    return sum(1 for g in groups if g.attendance_count > 0)


def coverage_percentage(groups_with_attendance: int, total_groups: int) -> str:
    """Share of groups with attendance as a percentage string with two decimals.

    Rounds half up; ``total_groups == 0`` yields ``"0.00"``.
    """
    if total_groups == 0:
        return "0.00"
    value = Decimal(groups_with_attendance) * 100 / Decimal(total_groups)
    return str(value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
