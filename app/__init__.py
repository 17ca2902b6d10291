import logging
import sys

from flask import Flask
from .config import Config
from .extensions import db
from .errors import register_error_handlers


def configure_logging(app):
    log_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(log_formatter)

    level = str(app.config.get("LOG_LEVEL") or "INFO").upper()

    # Package loggers (app.helpers.*, app.routes.*) share the same handler
    pkg_logger = logging.getLogger("app")
    if not pkg_logger.handlers:
        pkg_logger.addHandler(console_handler)
    pkg_logger.setLevel(level)

    app.logger.setLevel(level)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)
    db.init_app(app)
    register_error_handlers(app)

    from app.routes import register_blueprints
    register_blueprints(app)

    return app
