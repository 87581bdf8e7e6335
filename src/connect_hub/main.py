from __future__ import annotations

import uuid
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .settings import Settings, get_settings_module, load_settings

from .core.exceptions import DomainError
from .core.logging import bind_request_context, clear_request_context, configure_logging, get_logger
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .blog.controller import register as register_blog
from .email.controller import register as register_email
from .events.controller import register as register_events
from .groups.controller import register as register_groups
from .health.controller import register as register_health
from .reports.controller import register as register_reports
from .users.controller import register as register_users

log = get_logger(__name__)


def _bootstrap_database(settings: Settings) -> None:
    db_config = settings.db_config
    if settings.auto_init_db:
        apply_schema(db_config)
        log.info("schema_ready", tables=len(list_tables(db_config)))
    if settings.auto_seed_db:
        statements = apply_seed_sql(db_config)
        log.info("seed_ready", statements=statements)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        log.info("request_rejected", error=e.kind, status=e.status_code, message=str(e))
        return {"error": e.kind, "message": str(e)}, e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return {"error": e.name.lower().replace(" ", "_"), "message": e.description}, e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        log.exception("unhandled_error", error=str(e))
        return {"error": "internal_error", "message": "Internal server error"}, 500


def _register_request_context(app: Flask) -> None:
    @app.before_request
    def bind_request():
        clear_request_context()
        bind_request_context(
            request_id=request.headers.get("X-Request-ID") or str(uuid.uuid4()),
            method=request.method,
            path=request.path,
        )

    @app.teardown_request
    def unbind_request(_exc=None):
        clear_request_context()


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)

    if container is None:
        settings_module = get_settings_module()
        settings = load_settings(settings_module)
    else:
        settings_module = "injected"
        settings = container.settings

    configure_logging(
        settings.log_level,
        settings.log_format,
        sentry_dsn=settings.sentry_dsn,
        environment=settings.environment,
    )

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug
    app.config["TESTING"] = settings.testing
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024

    db = settings.db_config
    log.info(
        "app_starting",
        settings=settings_module,
        db=f"{db.get('user')}@{db.get('host')}:{db.get('port', 3306)}/{db.get('database')}",
    )

    if container is None:
        _bootstrap_database(settings)
        container = build_container(settings)

    _register_request_context(app)
    _register_error_handlers(app)

    register_health(app, container)
    register_auth(app, container)
    register_users(app, container)
    register_groups(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_blog(app, container)
    register_events(app, container)
    register_email(app, container)

    return app
