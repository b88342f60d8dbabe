"""Application factory for the demo application."""

from typing import Any, Mapping, Optional

from flask import Flask

from ..app_logging import setup_logger
from ..sessions import CookieJar
from . import routes


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Initialize the demo application."""
    app = Flask('cookiejar.demo')
    app.config.from_object('cookiejar.config')
    app.config.setdefault('LOGGING_JSON', False)
    if config is not None:
        app.config.update(config)
    if app.config['LOGGING_JSON']:
        setup_logger()

    CookieJar(app)
    app.register_blueprint(routes.blueprint)
    return app
