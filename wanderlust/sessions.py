"""Server-side sessions persisted in the application database.

The cookie only carries a signed, opaque session id. The session dict is
serialized with Flask's tagged JSON serializer, encrypted with Fernet and
stored in the ``sessions`` table. Records expire ``lifetime`` after their
last write; an unmodified session is touched (expiry extended, payload left
alone) at most once per ``touch_after``.
"""

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet, InvalidToken
from flask.json.tag import TaggedJSONSerializer
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import CallbackDict

from wanderlust.models import StoredSession

error_logger = logging.getLogger('error')


def utcnow():
    """Naive UTC timestamp, comparable with what every backend hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def derive_fernet_key(secret: str) -> bytes:
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


@dataclass
class SessionRecord:
    sid: str
    data: dict
    issued_at: datetime
    updated_at: datetime
    expires_at: datetime


class SessionStore:
    """Encrypted session records in the shared database.

    Failures never propagate: they are rolled back and reported to the
    registered error listeners.
    """

    def __init__(self, db, secret, lifetime=timedelta(days=7)):
        self.db = db
        self.lifetime = lifetime
        self.fernet = Fernet(derive_fernet_key(secret))
        self.serializer = TaggedJSONSerializer()
        self._error_listeners = []

    def on_error(self, listener):
        self._error_listeners.append(listener)
        return listener

    def _emit_error(self, operation, exc):
        for listener in self._error_listeners:
            listener(operation, exc)

    def _fail(self, operation, exc):
        try:
            self.db.session.rollback()
        except SQLAlchemyError as rollback_exc:
            error_logger.error(f"Session store rollback failed: {rollback_exc}")
        self._emit_error(operation, exc)

    def encrypt(self, data: dict) -> bytes:
        return self.fernet.encrypt(self.serializer.dumps(data).encode("utf-8"))

    def decrypt(self, payload: bytes) -> dict:
        return self.serializer.loads(self.fernet.decrypt(payload).decode("utf-8"))

    def load(self, sid: str) -> SessionRecord | None:
        try:
            row = self.db.session.get(StoredSession, sid)
            if row is None:
                return None
            if row.expires_at <= utcnow():
                self.db.session.delete(row)
                self.db.session.commit()
                return None
            data = self.decrypt(row.payload)
            return SessionRecord(
                sid=row.sid,
                data=data,
                issued_at=row.issued_at,
                updated_at=row.updated_at,
                expires_at=row.expires_at,
            )
        except InvalidToken as e:
            self._emit_error("load", e)
            return None
        except SQLAlchemyError as e:
            self._fail("load", e)
            return None

    def save(self, sid: str, data: dict, issued_at: datetime) -> bool:
        now = utcnow()
        try:
            payload = self.encrypt(data)
            row = self.db.session.get(StoredSession, sid)
            if row is None:
                row = StoredSession(sid=sid, issued_at=issued_at)
                self.db.session.add(row)
            row.payload = payload
            row.updated_at = now
            row.expires_at = now + self.lifetime
            self.db.session.commit()
            return True
        except SQLAlchemyError as e:
            self._fail("save", e)
            return False

    def touch(self, sid: str) -> bool:
        now = utcnow()
        try:
            self.db.session.execute(
                update(StoredSession)
                .where(StoredSession.sid == sid)
                .values(updated_at=now, expires_at=now + self.lifetime)
            )
            self.db.session.commit()
            return True
        except SQLAlchemyError as e:
            self._fail("touch", e)
            return False

    def delete(self, sid: str) -> bool:
        try:
            self.db.session.execute(delete(StoredSession).where(StoredSession.sid == sid))
            self.db.session.commit()
            return True
        except SQLAlchemyError as e:
            self._fail("delete", e)
            return False

    def purge_expired(self) -> int:
        """Deletes expired records and returns how many were removed."""
        result = self.db.session.execute(
            delete(StoredSession).where(StoredSession.expires_at <= utcnow())
        )
        self.db.session.commit()
        return result.rowcount


def log_store_error(operation, exc):
    error_logger.error(f"Session store error during {operation}: {exc}")


class ServerSession(CallbackDict, SessionMixin):
    """Session dict that remembers its id and when it was last written."""

    def __init__(self, initial=None, sid=None, new=False, issued_at=None, updated_at=None):
        def on_update(self):
            self.modified = True

        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False
        self.issued_at = issued_at
        self.updated_at = updated_at


class DatabaseSessionInterface(SessionInterface):
    """Flask session interface on top of :class:`SessionStore`."""

    session_class = ServerSession
    salt = "wanderlust-session"

    def __init__(self, store: SessionStore, touch_after=timedelta(hours=24), save_uninitialized=True):
        self.store = store
        self.touch_after = touch_after
        self.save_uninitialized = save_uninitialized

    def _signer(self, app):
        return Signer(app.secret_key, salt=self.salt)

    def _new_session(self):
        return self.session_class(sid=secrets.token_urlsafe(32), new=True, issued_at=utcnow())

    def regenerate(self, session):
        """Moves the session's data to a fresh id and drops the old record.

        The new cookie is issued when the response is saved.
        """
        if not session.new:
            self.store.delete(session.sid)
        session.sid = secrets.token_urlsafe(32)
        session.issued_at = utcnow()
        session.updated_at = None
        session.new = True
        session.modified = True

    def open_session(self, app, request):
        cookie = request.cookies.get(self.get_cookie_name(app))
        if not cookie:
            return self._new_session()
        try:
            sid = self._signer(app).unsign(cookie).decode("utf-8")
        except BadSignature:
            return self._new_session()

        record = self.store.load(sid)
        if record is None:
            return self._new_session()
        return self.session_class(
            record.data,
            sid=record.sid,
            issued_at=record.issued_at,
            updated_at=record.updated_at,
        )

    def cookie_expires(self, app, session):
        return session.issued_at + app.permanent_session_lifetime

    def touch_due(self, session):
        if session.updated_at is None:
            return False
        return utcnow() - session.updated_at >= self.touch_after

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if session.accessed:
            response.vary.add("Cookie")

        if not session:
            if not session.new and session.modified:
                self.store.delete(session.sid)
                response.delete_cookie(name, domain=domain, path=path)
                return
            if session.new and not self.save_uninitialized:
                return

        if session.new or session.modified:
            self.store.save(session.sid, dict(session), session.issued_at)
            response.set_cookie(
                name,
                self._signer(app).sign(session.sid).decode("utf-8"),
                expires=self.cookie_expires(app, session),
                httponly=self.get_cookie_httponly(app),
                domain=domain,
                path=path,
                secure=self.get_cookie_secure(app),
                samesite=self.get_cookie_samesite(app),
            )
        elif self.touch_due(session):
            self.store.touch(session.sid)
