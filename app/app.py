"""
Article Groups - Application Factory
Wires the settings, database, pipeline environment, metrics and routes together
"""
import os
import sys
import logging

import flask.cli
flask.cli.show_server_banner = lambda *args: None

from flask import Flask
from sqlalchemy import event
from sqlalchemy.engine import Engine
import structlog

from settings import load_settings, merge_settings
from db import init_db
from environment import PipelineEnvironment, set_pipeline_env
from exceptions import register_exception_handlers
from metrics import init_metrics
from utils import ColoredFormatter

from routes.layouts import layouts_bp
from routes.hooks import hooks_bp

# Logging configuration
formatter = ColoredFormatter(
    '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[handler]
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger('main')


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas for file databases"""
    import sqlite3

    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_app(settings=None, env=None):
    """
    Build the Flask application

    Args:
        settings: Settings overrides; the YAML settings file is read when omitted
        env: Prebuilt PipelineEnvironment (tests inject one with a temporary object store)
    """
    app_settings = merge_settings(settings) if settings is not None else load_settings()

    app = Flask(__name__)
    app.config['SQLALCHEMY_DATABASE_URI'] = app_settings['database']['uri']
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['ARTICLE_GROUPS_SETTINGS'] = app_settings

    init_db(app)
    set_pipeline_env(env or PipelineEnvironment.from_settings(app_settings))

    register_exception_handlers(app)
    init_metrics(app)

    app.register_blueprint(layouts_bp)
    app.register_blueprint(hooks_bp)

    logger.info("Article groups application initialized")
    return app


if __name__ == '__main__':
    application = create_app()
    port = int(os.environ.get('PORT', 8465))
    logger.info(f"Starting article groups server on port {port}")
    application.run(host='0.0.0.0', port=port)
