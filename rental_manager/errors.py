import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors the service layer hands to the transport layer."""
    status_code = 500
    default_message = 'Unexpected error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = 'Invalid input'


class NotFound(ServiceError):
    status_code = 404
    default_message = 'Resource not found'


class Conflict(ServiceError):
    status_code = 409
    default_message = 'Resource already exists'


class UnexpectedFailure(ServiceError):
    status_code = 500
    default_message = 'Internal server error'


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def service_error(e):
        return jsonify(error=e.message), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(error=e.description or e.name), e.code

    @app.errorhandler(Exception)
    def server_error(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify(error=UnexpectedFailure.default_message), 500
