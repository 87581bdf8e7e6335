from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import ensure_date_range
from ..core.enums import ReportFormat
from ..core.exceptions import UnsupportedFormatError, ValidationError
from ..core.logging import get_logger
from ..groups.repository import GroupRepository
from .aggregation import aggregate_by_month
from .coverage import count_groups_with_attendance, coverage_percentage
from .excel_exporter import ExcelReportExporter
from .model import AttendanceReport, GroupAttendance, MonthlyAttendance


def parse_report_format(value: Optional[str]) -> ReportFormat:
    raw = (value or ReportFormat.SHEET.value).strip().lower()
    try:
        fmt = ReportFormat(raw)
    except ValueError:
        raise ValidationError(f"Invalid format: {value!r} (expected 'sheet' or 'pdf')")
    if fmt == ReportFormat.PDF:
        raise UnsupportedFormatError("PDF export is not available yet")
    return fmt


class ReportService:
    """Builds the monthly attendance report and renders it to a file."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        groups: GroupRepository,
        exporter: ExcelReportExporter,
        *,
        logger=None,
    ):
        self._attendance = attendance
        self._groups = groups
        self._exporter = exporter
        self._log = logger or get_logger(__name__)

    def build_report(self, start: date, end: date) -> AttendanceReport:
        if start is None or end is None:
            raise ValidationError("start_date and end_date are required")
        ensure_date_range(start, end)

        facts = self._attendance.list_facts(start, end)
        roster = self._groups.list_active_roster()
        total_groups = len(roster)
        buckets = aggregate_by_month(facts)

        monthly = []
        for month in sorted(buckets):
            counts = buckets[month]
            groups = [
                GroupAttendance(
                    group_id=entry.group_id,
                    name=entry.name,
                    attendance_count=counts.get(entry.group_id, 0),
                    mentor=entry.mentor,
                )
                for entry in roster
            ]
            with_attendance = count_groups_with_attendance(groups)
            monthly.append(
                MonthlyAttendance(
                    month=month,
                    groups_with_attendance=with_attendance,
                    attendance_percentage=coverage_percentage(with_attendance, total_groups),
                    groups=groups,
                )
            )

        self._log.info(
            "attendance_report_built",
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            records=len(facts),
            total_groups=total_groups,
            months=len(monthly),
        )
        return AttendanceReport(start_date=start, end_date=end, total_groups=total_groups, monthly_attendance=monthly)

    def generate_file(self, start: date, end: date, fmt: ReportFormat = ReportFormat.SHEET) -> Path:
        if fmt != ReportFormat.SHEET:
            raise UnsupportedFormatError(f"{fmt.value} export is not available yet")
        report = self.build_report(start, end)
        return self._exporter.render(report)
