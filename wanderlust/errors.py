import logging
from flask import render_template
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from wanderlust.exceptions import AppError, DEFAULT_ERROR_MESSAGE
from wanderlust.models import db

error_logger = logging.getLogger('error')

NOT_FOUND_MESSAGE = "Page Not Found!"


def render_error(err):
    """Renders the shared error page for an :class:`AppError`."""
    status_code = getattr(err, "status_code", None) or 500
    message = getattr(err, "message", None) or DEFAULT_ERROR_MESSAGE
    return render_template(
        "error.html",
        err=err,
        status_code=status_code,
        message=message,
    ), status_code


def _format_validation_messages(messages):
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            if isinstance(errors, (list, tuple)):
                errors = " ".join(str(e) for e in errors)
            parts.append(f"{field}: {errors}")
        return "; ".join(parts)
    return str(messages)


def to_app_error(error):
    if isinstance(error, AppError):
        return error
    if isinstance(error, ValidationError):
        return AppError(400, f"Validation failed: {_format_validation_messages(error.messages)}")
    if isinstance(error, HTTPException):
        if error.code == 404:
            return AppError(404, NOT_FOUND_MESSAGE)
        return AppError(error.code or 500, error.name)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and 400 <= status_code < 600:
        return AppError(status_code, getattr(error, "message", None) or DEFAULT_ERROR_MESSAGE)
    return AppError(500, DEFAULT_ERROR_MESSAGE)


def register_error_handlers(app):
    """Installs the terminal error handler. Every error ends up here."""

    @app.errorhandler(Exception)
    def handle_error(error):
        app_error = to_app_error(error)
        if app_error.status_code >= 500:
            db.session.rollback()
            error_logger.error(f"Unhandled error: {error}", exc_info=error)
        return render_error(app_error)
