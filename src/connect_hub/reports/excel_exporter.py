from __future__ import annotations

import tempfile
import uuid
from pathlib import Path
from typing import Callable, List, Optional, Union

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import now_utc
from ..core.constants import REPORT_FILE_PREFIX, REPORT_SHEET_NAME, REPORT_TITLE
from ..core.exceptions import ExportError
from ..core.logging import get_logger
from .aggregation import month_label
from .model import AttendanceReport

LEADER_HEADER = "Connect Leader"
SUMMARY_LABELS = ("Total Connect Groups", "Connect Groups Attendance", "Attendance Percentage")

HEADER_COLOR = "FFE4A853"
SUMMARY_COLOR = "FFFFFFFF"
LEADER_COLUMN_WIDTH = 25
MONTH_COLUMN_WIDTH = 12

_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_CENTER = Alignment(horizontal="center", vertical="center")


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def report_frame(report: AttendanceReport) -> pd.DataFrame:
    """The report as a grid: one row per group (sorted by name), one column per month, then the summary rows.

    Zero counts are rendered as ``"-"``.
    """
    months = [m.month for m in report.monthly_attendance]

    names: dict[str, str] = {}
    counts: dict[str, dict[str, int]] = {}
    for monthly in report.monthly_attendance:
        for group in monthly.groups:
            names.setdefault(group.group_id, group.name)
            counts.setdefault(group.group_id, {})[monthly.month] = group.attendance_count

    ordered = sorted(names, key=lambda gid: (names[gid].casefold(), names[gid], gid))
    rows: List[list] = []
    for gid in ordered:
        per_month = counts.get(gid, {})
        rows.append([names[gid], *[(per_month.get(m, 0) or "-") for m in months]])

    rows.append([SUMMARY_LABELS[0], *[report.total_groups for _ in months]])
    rows.append([SUMMARY_LABELS[1], *[m.groups_with_attendance for m in report.monthly_attendance]])
    rows.append([SUMMARY_LABELS[2], *[f"{m.attendance_percentage}%" for m in report.monthly_attendance]])

    return pd.DataFrame(rows, columns=[LEADER_HEADER, *months])


class ExcelReportExporter:
    """Renders an ``AttendanceReport`` into a styled xlsx file in a scratch directory.

    The caller owns the returned file and must delete it once streamed.
    """

    def __init__(
        self,
        export_dir: Optional[Union[str, Path]] = None,
        *,
        clock: Callable = now_utc,
        logger=None,
    ):
        self._export_dir = Path(export_dir) if export_dir else Path(tempfile.gettempdir())
        self._clock = clock
        self._log = logger or get_logger(__name__)

    def _target_path(self) -> Path:
        millis = int(self._clock().timestamp() * 1000)
        path = self._export_dir / f"{REPORT_FILE_PREFIX}-{millis}.xlsx"
        if path.exists():
            path = self._export_dir / f"{REPORT_FILE_PREFIX}-{millis}-{uuid.uuid4().hex[:8]}.xlsx"
        return path

    def render(self, report: AttendanceReport) -> Path:
        frame = report_frame(report)
        header = [LEADER_HEADER, *[month_label(m.month) for m in report.monthly_attendance]]
        group_rows = len(frame) - len(SUMMARY_LABELS)

        self._export_dir.mkdir(parents=True, exist_ok=True)
        path = self._target_path()
        self._write(path, frame, header, group_rows)

        if not path.is_file():
            raise ExportError("Failed to generate the attendance report file")

        self._log.info("attendance_report_exported", path=str(path), groups=group_rows, months=len(header) - 1)
        return path

    def _write(self, path: Path, frame: pd.DataFrame, header: List[str], group_rows: int) -> None:
        column_count = len(header)

        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name=REPORT_SHEET_NAME, index=False, header=header, startrow=1)
            sheet = writer.sheets[REPORT_SHEET_NAME]

            title = sheet.cell(row=1, column=1, value=REPORT_TITLE)
            title.font = Font(bold=True, size=16)
            title.alignment = _CENTER
            title.fill = _solid(HEADER_COLOR)
            if column_count > 1:
                sheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=column_count)

            for col in range(1, column_count + 1):
                cell = sheet.cell(row=2, column=col)
                cell.font = Font(bold=True)
                cell.fill = _solid(HEADER_COLOR)
                cell.alignment = _CENTER

            first_data_row = 3
            summary_start = first_data_row + group_rows
            last_row = summary_start + len(SUMMARY_LABELS) - 1

            for row in range(first_data_row, last_row + 1):
                is_summary = row >= summary_start
                for col in range(1, column_count + 1):
                    cell = sheet.cell(row=row, column=col)
                    cell.alignment = _CENTER
                    if is_summary:
                        cell.font = Font(bold=True)
                        cell.fill = _solid(SUMMARY_COLOR)

            for row in range(1, last_row + 1):
                for col in range(1, column_count + 1):
                    sheet.cell(row=row, column=col).border = _BORDER

            sheet.column_dimensions[get_column_letter(1)].width = LEADER_COLUMN_WIDTH
            for col in range(2, column_count + 1):
                sheet.column_dimensions[get_column_letter(col)].width = MONTH_COLUMN_WIDTH
