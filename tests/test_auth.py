"""Login, logout, sign-up and the credential strategy."""

from conftest import PASSWORD, last_context, login, make_user

from wanderlust import db
from wanderlust.auth import AuthError, PasswordStrategy, authenticate
from wanderlust.models import User


class TestPasswordStrategy:

    def test_verify_returns_user_id_for_valid_credentials(self, app, user_id):
        with app.app_context():
            assert PasswordStrategy().verify({"username": "alice", "password": PASSWORD}) == user_id

    def test_verify_returns_auth_error_for_wrong_password(self, app, user_id):
        with app.app_context():
            result = PasswordStrategy().verify({"username": "alice", "password": "nope"})

        assert isinstance(result, AuthError)

    def test_verify_returns_auth_error_for_unknown_user(self, app):
        with app.app_context():
            result = PasswordStrategy().verify({"username": "ghost", "password": PASSWORD})

        assert isinstance(result, AuthError)

    def test_password_is_stored_hashed(self, app, user_id):
        with app.app_context():
            user = db.session.get(User, user_id)
            assert user.password_hash != PASSWORD
            assert user.check_password(PASSWORD)

    def test_authenticate_uses_strategy_registered_on_app(self, app, user_id):
        class AlwaysAlice:
            def verify(self, credentials):
                return user_id

        app.extensions["wanderlust.auth"] = AlwaysAlice()
        with app.app_context():
            user = authenticate({})

        assert user.username == "alice"


class TestLogin:

    def test_valid_login_flashes_welcome_and_sets_current_user(self, client, user_id, captured_templates):
        response = login(client)

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/listings")

        client.get("/listings")
        context = last_context(captured_templates)
        assert context["success"] == ["Welcome back to Wanderlust!"]
        assert context["error"] == []
        assert context["current_user"].id == user_id
        assert context["current_user"].username == "alice"

    def test_invalid_login_stays_anonymous_with_error_flash(self, client, user_id, captured_templates):
        response = login(client, password="wrong-password")

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")

        client.get("/login")
        context = last_context(captured_templates)
        assert context["error"] == ["Invalid username or password."]
        assert context["success"] == []
        assert context["current_user"] is None

    def test_blank_login_form_is_rejected(self, client, captured_templates):
        client.post("/login", data={})
        client.get("/login")

        assert last_context(captured_templates)["error"] == ["Invalid username or password."]

    def test_login_returns_to_originally_requested_page(self, client, user_id):
        response = client.get("/listings/new")
        assert response.headers["Location"].endswith("/login")

        response = login(client)

        assert response.headers["Location"].endswith("/listings/new")

    def test_logout_clears_identity(self, logged_in_client, captured_templates):
        response = logged_in_client.get("/logout")
        assert response.status_code == 302

        logged_in_client.get("/listings")
        context = last_context(captured_templates)
        assert context["current_user"] is None
        assert context["success"] == ["You are logged out!"]


class TestSignup:

    def test_signup_creates_user_and_logs_in(self, app, client, captured_templates):
        response = client.post("/signup", data={
            "username": "bob",
            "email": "bob@example.com",
            "password": "hunter22",
        })
        assert response.status_code == 302

        client.get("/listings")
        context = last_context(captured_templates)
        assert context["success"] == ["Welcome to Wanderlust!"]
        assert context["current_user"].username == "bob"
        with app.app_context():
            assert User.query.filter_by(username="bob").count() == 1

    def test_duplicate_username_is_rejected(self, app, client, user_id, captured_templates):
        response = client.post("/signup", data={
            "username": "alice",
            "email": "other@example.com",
            "password": "hunter22",
        })
        assert response.headers["Location"].endswith("/signup")

        client.get("/signup")
        context = last_context(captured_templates)
        assert context["error"] == ["A user with the given username is already registered."]
        assert context["current_user"] is None
        with app.app_context():
            assert User.query.filter_by(username="alice").count() == 1

    def test_invalid_signup_flashes_validation_error(self, client, captured_templates):
        client.post("/signup", data={"username": "bo", "email": "not-an-email", "password": "x"})
        client.get("/signup")

        errors = last_context(captured_templates)["error"]
        assert len(errors) == 1
        assert "email" in errors[0]


class TestProtectedViews:

    def test_anonymous_user_is_sent_to_login(self, client, captured_templates):
        response = client.get("/listings/new")

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")
        client.get("/login")
        assert last_context(captured_templates)["error"] == ["You must be logged in to do that."]

    def test_logged_in_user_can_open_new_listing_form(self, logged_in_client):
        response = logged_in_client.get("/listings/new")

        assert response.status_code == 200

    def test_second_user_sees_own_identity(self, app, client, user_id, captured_templates):
        make_user(app, username="carol")
        other = app.test_client()
        login(client)
        login(other, username="carol")

        other.get("/listings")
        assert last_context(captured_templates)["current_user"].username == "carol"
        client.get("/listings")
        assert last_context(captured_templates)["current_user"].username == "alice"
