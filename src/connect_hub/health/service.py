"""Liveness and readiness checks."""
from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

import psutil

from ..common.datetime_utils import iso, now_utc
from ..core.constants import HEALTH_CHECK_CRON
from ..core.logging import get_logger
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor

_MB = 1024 * 1024


class HealthService:
    def __init__(
        self,
        conn: DatabaseConnection,
        *,
        process: Optional[psutil.Process] = None,
        clock: Callable = now_utc,
        logger=None,
    ):
        self._conn = conn
        self._process = process or psutil.Process()
        self._clock = clock
        self._log = logger or get_logger(__name__)

    def check_database(self) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            with db_cursor(self._conn) as (_, cur):
                cur.execute("SELECT 1")
                cur.fetchall()
        except Exception as e:
            # A failing store is a reportable state here, not an error to raise.
            self._log.warning("health_database_down", error=str(e))
            return {"status": "down", "error": str(e)}
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        return {"status": "up", "response_time_ms": elapsed_ms}

    def memory(self) -> Dict[str, Any]:
        used = self._process.memory_info().rss
        total = psutil.virtual_memory().total
        return {
            "used_mb": round(used / _MB, 2),
            "total_mb": round(total / _MB, 2),
            "percentage": round(used / total * 100, 2) if total else 0.0,
        }

    def uptime(self) -> float:
        return round(time.time() - self._process.create_time(), 2)

    def check_health(self) -> Dict[str, Any]:
        database = self.check_database()
        return {
            "status": "healthy" if database["status"] == "up" else "unhealthy",
            "timestamp": iso(self._clock()),
            "database": database,
            "uptime": self.uptime(),
            "memory": self.memory(),
        }

    def ping(self) -> Dict[str, Any]:
        return {"status": "pong", "timestamp": iso(self._clock())}

    def run_scheduled_check(self) -> bool:
        """Daily liveness probe. Logs the outcome and never raises."""
        try:
            result = self.check_health()
        except Exception:
            self._log.exception("scheduled_health_check_crashed")
            return False
        if result["status"] == "healthy":
            self._log.info("scheduled_health_check_ok", schedule=HEALTH_CHECK_CRON, response_time_ms=result["database"].get("response_time_ms"))
            return True
        self._log.error("scheduled_health_check_failed", schedule=HEALTH_CHECK_CRON, error=result["database"].get("error"))
        return False
