from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import (
    DuplicateEmail,
    Forbidden,
    NotFound,
    StorageUnavailable,
    Unauthenticated,
)

ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # 401: the reason stays in the logs, never in the body
    @app.errorhandler(Unauthenticated)
    def handle_unauthenticated(err: Unauthenticated):
        return error_response("UNAUTHORIZED", err.message, 401)

    # 403: caller already proved identity, so naming the gap is fine
    @app.errorhandler(Forbidden)
    def handle_forbidden(err: Forbidden):
        return error_response("FORBIDDEN", err.message, 403)

    @app.errorhandler(DuplicateEmail)
    def handle_duplicate_email(err: DuplicateEmail):
        return error_response("CONFLICT", err.message, 409)

    @app.errorhandler(NotFound)
    def handle_not_found(err: NotFound):
        return error_response("NOT_FOUND", err.message, 404)

    @app.errorhandler(StorageUnavailable)
    def handle_storage_unavailable(err: StorageUnavailable):
        logging.error("Storage unavailable: %s", err.message)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Integrity errors that no service translated (FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=err)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        if "foreign key constraint" in lower_msg or "foreign key mismatch" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions (404 routing, 405, abort(...)) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(ERROR_CODES.get(status, "BAD_REQUEST"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logging.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
