import logging
from sqlalchemy import event, text
from tenacity import Retrying, stop_after_attempt, wait_exponential

from wanderlust.models import db

app_logger = logging.getLogger('app')
error_logger = logging.getLogger('error')

FALLBACK_DATABASE_URI = "sqlite://"


def resolve_database_uri(app):
    """Falls back to an empty in-memory database when no URL is configured."""
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        error_logger.error("No ATLASDB_URL found in environment variables. Running without a database.")
        app.config["SQLALCHEMY_DATABASE_URI"] = FALLBACK_DATABASE_URI


def _on_connect(dbapi_connection, connection_record):
    app_logger.info("Database connection opened.")


def _on_invalidate(dbapi_connection, connection_record, exception):
    error_logger.error(f"Database connection lost: {exception}")


def _ping():
    with db.engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    return True


def _report_failure(retry_state):
    exc = retry_state.outcome.exception()
    error_logger.error(f"Database connection error: {exc}")
    return False


def connect_database(app):
    """Checks that the configured database answers; never raises.

    Must be called inside an application context. Returns False when the
    database is unreachable, leaving the app running in a degraded state.
    """
    event.listen(db.engine, "connect", _on_connect)
    event.listen(db.engine, "invalidate", _on_invalidate)

    retrying = Retrying(
        stop=stop_after_attempt(app.config.get("DB_CONNECT_ATTEMPTS", 1)),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry_error_callback=_report_failure,
    )
    connected = retrying(_ping)
    if connected:
        app_logger.info("Connected to database")
    return connected
