import logging
from urllib.parse import parse_qs

from flask import g, request
from flask_login import current_user
from werkzeug.exceptions import NotFound

from wanderlust.exceptions import AppError
from wanderlust.errors import NOT_FOUND_MESSAGE
from wanderlust.flash import flash_queue, SUCCESS, ERROR
from wanderlust.pipeline import Continue, Halt

access_logger = logging.getLogger('access')


class MethodOverrideMiddleware:
    """Lets HTML forms send PUT/PATCH/DELETE as ``POST ...?_method=PUT``."""

    allowed_methods = frozenset(["PUT", "PATCH", "DELETE"])
    param = "_method"

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD", "").upper() == "POST":
            query = parse_qs(environ.get("QUERY_STRING", ""))
            method = (query.get(self.param) or [""])[0].upper()
            if method in self.allowed_methods:
                environ["wanderlust.original_method"] = "POST"
                environ["REQUEST_METHOD"] = method
        return self.app(environ, start_response)


# --- Request pipeline stages ---

def log_request():
    access_logger.info(f"Request: {request.method} {request.path} - IP: {request.remote_addr}")
    return Continue()


def inject_view_context():
    """Drains flash messages and resolves the user for the views."""
    queue = flash_queue()
    g.success = queue.drain(SUCCESS)
    g.error = queue.drain(ERROR)
    g.current_user = current_user._get_current_object() if current_user.is_authenticated else None
    return Continue()


def reject_unmatched_route():
    if isinstance(request.routing_exception, NotFound):
        return Halt(error=AppError(404, NOT_FOUND_MESSAGE))
    return Continue()


def view_context():
    """Template context processor; values are never None except the user."""
    return {
        "success": g.get("success") or [],
        "error": g.get("error") or [],
        "current_user": g.get("current_user"),
    }
