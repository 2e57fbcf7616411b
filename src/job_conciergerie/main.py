from __future__ import annotations

import importlib
from typing import Optional

import click
from dotenv import load_dotenv
from flask import Flask

from .auth.controller import register as register_auth
from .common.logging import configure as configure_logging
from .common.logging import get_logger
from .conciergeries.controller import register as register_conciergeries
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .employees.controller import register as register_employees
from .errors import register_error_handlers
from .homes.controller import register as register_homes
from .middleware import register as register_middleware
from .missions.controller import register as register_missions
from .notifications.controller import register as register_notifications
from .pages.controller import register as register_pages
from .storage.controller import register as register_storage

LOG = get_logger("job_conciergerie")


def create_app(settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    configure_logging(getattr(settings, "LOG_LEVEL", None))
    LOG.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            LOG.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["container"] = container
    register_error_handlers(app)
    register_middleware(app, container.auth_service)

    register_auth(app, container)
    register_conciergeries(app, container)
    register_employees(app, container)
    register_homes(app, container)
    register_missions(app, container)
    register_storage(app, container)
    register_notifications(app, container)
    register_pages(app, container)

    _register_commands(app, container)
    return app


def _register_commands(app: Flask, container: Container) -> None:
    @app.cli.command("notify-late-missions")
    def notify_late_missions():
        """Email conciergeries about missions that ended without being completed."""
        sent = container.mission_service.notify_late_missions()
        click.echo(f"late completion emails sent: {sent}")

    @app.cli.command("retry-emails")
    def retry_emails():
        """Resend queued emails whose last attempt is old enough."""
        report = container.notification_service.process_retries()
        click.echo(f"sent={report.sent} failed={report.failed} dropped={report.dropped}")
