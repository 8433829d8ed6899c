"""
Garden Storefront - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class StorefrontException(Exception):
    """Base exception for the storefront"""
    def __init__(self, message: str, code: str = "STOREFRONT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'code': self.code,
            'success': False,
            'message': self.message
        }


class ParseError(StorefrontException):
    """A single malformed CSV row. Recovered by the parser, never surfaced."""
    def __init__(self, message: str, line: str = None):
        super().__init__(message, code="PARSE_ERROR")
        self.line = line
        logger.debug(f"Parse error: {message}")


class FetchError(StorefrontException):
    """Network non-success, empty body, or a parse yielding nothing"""
    def __init__(self, message: str, status_code: int = None):
        super().__init__(message, code="FETCH_ERROR")
        self.status_code = status_code
        logger.error(f"Fetch error: {message}")


class ValidationError(StorefrontException):
    """Missing or malformed required input"""
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")
        logger.warning(f"Validation error: {message}")


class ProxyUpstreamError(StorefrontException):
    """Upstream answered the proxied fetch with a non-2xx status"""
    def __init__(self, message: str, status_code: int):
        super().__init__(message, code="PROXY_UPSTREAM_ERROR")
        self.status_code = status_code
        logger.warning(f"Proxy upstream error ({status_code}): {message}")


class ProxyTransportError(StorefrontException):
    """DNS, connection or timeout failure while proxying"""
    def __init__(self, message: str):
        super().__init__(message, code="PROXY_TRANSPORT_ERROR")
        logger.error(f"Proxy transport error: {message}")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'code': e.name.upper().replace(' ', '_'),
            'success': False,
            'message': e.description
        }), e.code

    @app.errorhandler(StorefrontException)
    def handle_storefront_exception(e):
        """Handle storefront custom exceptions"""
        return jsonify(e.to_dict()), 400

    @app.errorhandler(ValidationError)
    def handle_validation_exception(e):
        """Handle validation exceptions"""
        return jsonify(e.to_dict()), 400

    @app.errorhandler(FetchError)
    def handle_fetch_exception(e):
        """Handle catalog fetch exceptions"""
        return jsonify(e.to_dict()), 502

    @app.errorhandler(ProxyUpstreamError)
    def handle_proxy_upstream_exception(e):
        """Mirror the upstream status as plain text"""
        return e.message, e.status_code, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(ProxyTransportError)
    def handle_proxy_transport_exception(e):
        return e.message, 500, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'code': 'INTERNAL_ERROR',
            'success': False,
            'message': 'An unexpected error occurred'
        }), 500
