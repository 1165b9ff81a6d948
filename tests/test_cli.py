from datetime import timedelta

from wanderlust import db
from wanderlust.models import User, StoredSession
from wanderlust.sessions import utcnow


def test_create_user_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-user", "dave", "dave@example.com", "pa55word"])

    assert "created successfully" in result.output
    with app.app_context():
        user = User.query.filter_by(username="dave").one()
        assert user.check_password("pa55word")


def test_create_user_command_refuses_duplicates(app, user_id):
    result = app.test_cli_runner().invoke(args=["create-user", "alice", "a@example.com", "whatever"])

    assert "already exists" in result.output


def test_purge_sessions_command(app):
    store = app.session_interface.store
    with app.app_context():
        store.save("stale", {"a": 1}, utcnow())
        db.session.get(StoredSession, "stale").expires_at = utcnow() - timedelta(hours=1)
        db.session.commit()

    result = app.test_cli_runner().invoke(args=["purge-sessions"])

    assert "Removed 1 expired session(s)." in result.output
