from __future__ import annotations

from pathlib import Path

from flask import Flask, Response, request, stream_with_context

from ..auth.guard import Guards
from ..common.datetime_utils import parse_iso_date
from ..common.http import json_response
from ..common.validators import require_non_empty
from ..container import Container
from ..core.constants import REPORT_MIMETYPE
from ..core.logging import get_logger
from ..core.policy import Action
from .service import parse_report_format

_CHUNK_SIZE = 64 * 1024

log = get_logger(__name__)


def _date_range_args():
    start = parse_iso_date(require_non_empty(request.args.get("start_date"), "start_date"))
    end = parse_iso_date(require_non_empty(request.args.get("end_date"), "end_date"))
    return start, end


def iter_file(path: Path):
    with open(path, "rb") as fh:
        while True:
            chunk = fh.read(_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def remove_report_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        log.warning("report_file_cleanup_failed", path=str(path), error=str(e))


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    reports = container.report_service

    @app.get("/connect-attendance/report", endpoint="attendance_report")
    @guards.requires(Action.ATTENDANCE_REPORT)
    def attendance_report():
        start, end = _date_range_args()
        return json_response(reports.build_report(start, end).to_dict())

    @app.get("/connect-attendance/report/generate", endpoint="attendance_report_generate")
    @guards.requires(Action.ATTENDANCE_REPORT)
    def attendance_report_generate():
        fmt = parse_report_format(request.args.get("format"))
        start, end = _date_range_args()
        path = reports.generate_file(start, end, fmt)
        response = Response(stream_with_context(iter_file(path)), mimetype=REPORT_MIMETYPE)
        # Runs for completed, aborted and HEAD responses alike.
        response.call_on_close(lambda: remove_report_file(path))
        response.headers["Content-Disposition"] = f'attachment; filename="{path.name}"'
        return response
