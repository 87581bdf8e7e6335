from __future__ import annotations

import click
from flask import Flask

from ..common.http import json_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    health = container.health_service

    @app.get("/health", endpoint="health")
    def health_check():
        return json_response(health.check_health())

    @app.get("/health/ping", endpoint="health_ping")
    def health_ping():
        return json_response(health.ping())

    @app.get("/health/ready", endpoint="health_ready")
    def health_ready():
        result = health.check_health()
        return json_response(result, status=200 if result["status"] == "healthy" else 503)

    # cron: 0 2 * * *  flask --app connect_hub.main health-check
    @app.cli.command("health-check")
    def health_check_command():
        """Run the daily liveness probe once."""
        ok = health.run_scheduled_check()
        click.echo("healthy" if ok else "unhealthy")
