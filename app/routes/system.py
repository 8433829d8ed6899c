"""
System Routes - Health probes and cache information
"""

from flask import Blueprint, current_app

from api_responses import success_response, handle_api_errors
from constants import BUILD_VERSION
from utils import now_utc

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.route("/health", methods=["GET"])
@handle_api_errors
def health_check_api():
    """
    Health check endpoint for monitoring.
    """
    checks = {
        "timestamp": now_utc().isoformat(),
        "version": BUILD_VERSION,
        "storage": "unknown",
    }

    store = current_app.catalog_service.cache.store
    try:
        checks["storage"] = store.info()
    except Exception as e:
        checks["storage"] = f"error: {str(e)}"

    checks["catalog"] = current_app.catalog_service.cache.stats()
    return success_response(data={"status": "healthy", "checks": checks})


@system_bp.route("/health/live", methods=["GET"])
@handle_api_errors
def health_live_api():
    """
    Liveness probe - checks if the application is alive.
    """
    return success_response(data={"status": "alive", "timestamp": now_utc().isoformat()})


@system_bp.post("/cache/clear")
@handle_api_errors
def clear_cache_api():
    """
    Drop the in-memory catalog; the next request rehydrates it.
    """
    current_app.catalog_service.cache.invalidate()
    return success_response(message="Catalog memory cache cleared")
