from __future__ import annotations

from decimal import Decimal

import pytest

from connect_hub.reports.coverage import count_groups_with_attendance, coverage_percentage
from connect_hub.reports.model import GroupAttendance


@pytest.mark.parametrize("with_attendance", [0, 1, 5, 100])
def test_zero_groups_is_zero_percent(with_attendance):
    assert coverage_percentage(with_attendance, 0) == "0.00"


@pytest.mark.parametrize(
    "with_attendance,total,expected",
    [
        (1, 3, "33.33"),
        (2, 3, "66.67"),
        (3, 3, "100.00"),
        (0, 7, "0.00"),
        (1, 8, "12.50"),
        # 0.125 rounds half up
        (1, 800, "0.13"),
    ],
)
def test_percentage_is_rounded_to_two_places(with_attendance, total, expected):
    assert coverage_percentage(with_attendance, total) == expected


def test_percentage_stays_within_bounds():
    for total in range(1, 40):
        for with_attendance in range(total + 1):
            value = Decimal(coverage_percentage(with_attendance, total))
            assert Decimal("0.00") <= value <= Decimal("100.00")


def test_counts_only_groups_with_meetings():
    groups = [
        GroupAttendance("a", "A", 2),
        GroupAttendance("b", "B", 0),
        GroupAttendance("c", "C", 1),
    ]
    assert count_groups_with_attendance(groups) == 2
