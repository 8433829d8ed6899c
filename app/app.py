"""
Garden Storefront - Catalog API and image proxy
Application factory and initialization
"""
import os
import sys
import logging

import flask.cli
flask.cli.show_server_banner = lambda *args: None

from flask import Flask
import requests
import structlog

from constants import BUILD_VERSION
from settings import load_settings
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs
from exceptions import register_exception_handlers
from persistent_store import create_store
from csv_fetcher import CsvFetcher
from catalog_cache import CatalogCache
from catalog_service import CatalogService

# Routes
from routes.catalog import catalog_bp
from routes.images import images_bp
from routes.system import system_bp


def configure_logging():
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

    # Apply filter to hide date from http access logs
    logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())


configure_logging()
logger = structlog.get_logger('main')


def create_app(settings=None, store=None, fetcher=None, http_session=None):
    """
    Application factory

    The catalog cache is built once here and shared by every request.
    Collaborators can be injected for tests.
    """
    app = Flask(__name__)
    settings = settings or load_settings()
    app.config["STOREFRONT_SETTINGS"] = settings

    catalog_settings = settings["catalog"]
    http_session = http_session or requests.Session()
    store = store if store is not None else create_store(settings)
    fetcher = fetcher or CsvFetcher(session=http_session, timeout=catalog_settings.get("request_timeout", 15))

    cache = CatalogCache(store, fetcher, business_sheet_url=catalog_settings["business_sheet_url"])
    app.catalog_service = CatalogService(cache, stale_time=catalog_settings.get("stale_time", 1800))
    app.http_session = http_session

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(catalog_bp)
    app.register_blueprint(images_bp)
    app.register_blueprint(system_bp)

    logger.info("Storefront initialized", storage=getattr(store, "name", type(store).__name__))
    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5000))
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info(f'Starting server on port {port}...')
    app.run(debug=False, use_reloader=False, host="0.0.0.0", port=port)
    logger.info('Shutting down server...')
