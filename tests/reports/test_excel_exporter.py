from __future__ import annotations

from datetime import datetime, timezone

import pytest
from openpyxl import load_workbook

from connect_hub.core.exceptions import ExportError
from connect_hub.reports.excel_exporter import ExcelReportExporter, report_frame
from connect_hub.reports.model import AttendanceReport, GroupAttendance, MonthlyAttendance
from connect_hub.users.model import MentorSummary


def _report(months):
    """``months`` maps a month key to ``[(group_id, name, count), ...]``."""
    monthly = []
    total = 0
    for month, rows in months.items():
        groups = [GroupAttendance(gid, name, count) for gid, name, count in rows]
        total = len(groups)
        with_attendance = sum(1 for g in groups if g.attendance_count)
        monthly.append(
            MonthlyAttendance(
                month=month,
                groups_with_attendance=with_attendance,
                attendance_percentage=f"{with_attendance * 100 / total:.2f}" if total else "0.00",
                groups=groups,
            )
        )
    start = datetime(2024, 1, 1).date()
    return AttendanceReport(start_date=start, end_date=start, total_groups=total, monthly_attendance=monthly)


@pytest.fixture
def report():
    roster = [("g-z", "zeta"), ("g-b", "Beta"), ("g-a", "alpha")]
    return _report(
        {
            "2024-01": [(gid, name, {"g-a": 2}.get(gid, 0)) for gid, name in roster],
            "2024-02": [(gid, name, {"g-b": 1, "g-z": 3}.get(gid, 0)) for gid, name in roster],
        }
    )


@pytest.fixture
def exporter(tmp_path):
    return ExcelReportExporter(tmp_path, clock=lambda: datetime(2024, 3, 1, tzinfo=timezone.utc))


def _rows(path):
    sheet = load_workbook(path)["Attendance Report"]
    return sheet, [list(r) for r in sheet.iter_rows(values_only=True)]


def test_frame_sorts_groups_by_name_and_dashes_zero_counts(report):
    frame = report_frame(report)

    assert list(frame["Connect Leader"])[:3] == ["alpha", "Beta", "zeta"]
    assert list(frame.iloc[0, 1:]) == [2, "-"]
    assert list(frame.iloc[1, 1:]) == ["-", 1]
    assert list(frame.iloc[2, 1:]) == ["-", 3]


def test_workbook_layout(exporter, report):
    path = exporter.render(report)
    sheet, rows = _rows(path)

    assert rows[0][0] == "ABSENCE REPORT"
    assert "A1:C1" in {str(r) for r in sheet.merged_cells.ranges}
    assert rows[1] == ["Connect Leader", "JAN", "FEB"]
    assert rows[2] == ["alpha", 2, "-"]
    assert rows[3] == ["Beta", "-", 1]
    assert rows[4] == ["zeta", "-", 3]
    assert rows[5] == ["Total Connect Groups", 3, 3]
    assert rows[6] == ["Connect Groups Attendance", 1, 2]
    assert rows[7] == ["Attendance Percentage", "33.33%", "66.67%"]
    assert len(rows) == 8


def test_workbook_styling(exporter, report):
    sheet, _ = _rows(exporter.render(report))

    assert sheet["A1"].font.bold
    assert sheet["A1"].fill.start_color.rgb == "FFE4A853"
    assert sheet["B2"].fill.start_color.rgb == "FFE4A853"
    assert sheet["A6"].font.bold
    assert sheet["A6"].fill.start_color.rgb == "FFFFFFFF"
    assert sheet["C8"].border.left.style == "thin"
    assert sheet.column_dimensions["A"].width == 25
    assert sheet.column_dimensions["C"].width == 12


def test_file_is_named_after_the_clock_and_left_for_the_caller(exporter, report, tmp_path):
    path = exporter.render(report)

    assert path == tmp_path / "attendance-report-1709251200000.xlsx"
    assert path.is_file()

    second = exporter.render(report)
    assert second != path
    assert second.is_file()


def test_report_without_months_still_renders_summary(exporter):
    path = exporter.render(_report({}))
    sheet, rows = _rows(path)

    assert rows[0] == ["ABSENCE REPORT"]
    assert rows[1] == ["Connect Leader"]
    assert [r[0] for r in rows[2:]] == ["Total Connect Groups", "Connect Groups Attendance", "Attendance Percentage"]
    assert not sheet.merged_cells.ranges


def test_missing_output_raises_export_error(exporter, report, monkeypatch, tmp_path):
    monkeypatch.setattr(ExcelReportExporter, "_write", lambda self, path, frame, header, group_rows: None)

    with pytest.raises(ExportError):
        exporter.render(report)
    assert list(tmp_path.iterdir()) == []


def test_mentor_does_not_change_rows():
    mentor = MentorSummary(id="m1", name="Mentor One", email="m1@example.com")
    monthly = MonthlyAttendance("2024-01", 1, "100.00", [GroupAttendance("g", "Solo", 4, mentor)])
    report = AttendanceReport(datetime(2024, 1, 1).date(), datetime(2024, 1, 31).date(), 1, [monthly])

    assert report_frame(report).iloc[0].tolist() == ["Solo", 4]
