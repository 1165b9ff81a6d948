import logging
import click
from flask import Flask, redirect, url_for
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
from werkzeug.middleware.shared_data import SharedDataMiddleware

from wanderlust.config import Config, DEFAULT_SECRET
from wanderlust.models import db, User
from wanderlust.logging_config import setup_logging

# Initialize extensions
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=Config.RATELIMIT_STORAGE_URI
)
migrate = Migrate()
csrf = CSRFProtect()


def create_app(config_class=Config):
    """Application factory function.

    The returned app is the only holder of configuration, the database
    handle and the request pipeline; nothing is looked up from globals at
    request time except through it.
    """
    setup_logging(config_class.LOG_DIR)
    app_logger = logging.getLogger('app')

    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config["SECRET_KEY"] == DEFAULT_SECRET:
        logging.getLogger('security').warning(
            "SECRET is not set; using the insecure default. Do not run like this in production."
        )

    # --- Persistence client ---
    from wanderlust.database import resolve_database_uri, connect_database
    resolve_database_uri(app)
    db.init_app(app)
    migrate.init_app(app, db)
    with app.app_context():
        connect_database(app)

    # --- Sessions ---
    from wanderlust.sessions import SessionStore, DatabaseSessionInterface, log_store_error
    store = SessionStore(db, app.config["SECRET_KEY"], lifetime=app.config["PERMANENT_SESSION_LIFETIME"])
    store.on_error(log_store_error)
    app.session_interface = DatabaseSessionInterface(
        store,
        touch_after=app.config["SESSION_TOUCH_AFTER"],
        save_uninitialized=app.config["SESSION_SAVE_UNINITIALIZED"],
    )

    # --- Auth, CSRF, rate limiting ---
    from wanderlust.auth import init_auth
    init_auth(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # --- WSGI stages: method override, then static files ---
    from wanderlust.middleware import (
        MethodOverrideMiddleware, log_request, inject_view_context, reject_unmatched_route, view_context,
    )
    app.wsgi_app = SharedDataMiddleware(app.wsgi_app, {app.static_url_path: app.static_folder})
    app.wsgi_app = MethodOverrideMiddleware(app.wsgi_app)

    # --- Request pipeline (runs after session load and auth resolution) ---
    from wanderlust.pipeline import RequestPipeline
    pipeline = RequestPipeline([log_request, inject_view_context, reject_unmatched_route])
    pipeline.init_app(app)
    app.extensions["wanderlust.pipeline"] = pipeline
    app.context_processor(view_context)

    # --- Register Blueprints ---
    from wanderlust.routes.listings import listings_bp
    from wanderlust.routes.reviews import reviews_bp
    from wanderlust.routes.users import users_bp
    app.register_blueprint(listings_bp, url_prefix='/listings')
    app.register_blueprint(reviews_bp, url_prefix='/listings/<int:listing_id>/reviews')
    app.register_blueprint(users_bp)

    @app.route("/")
    def index():
        """Redirects the base URL ('/') to the listings page."""
        return redirect(url_for('listings.index'))

    # --- Error funnel, registered last ---
    from wanderlust.errors import register_error_handlers
    register_error_handlers(app)

    # --- CLI Commands ---
    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("email")
    @click.argument("password")
    def create_user(username, email, password):
        """Creates a new user."""
        if User.query.filter_by(username=username).first():
            print(f"User '{username}' already exists.")
            return
        new_user = User(username=username, email=email)
        new_user.set_password(password)
        db.session.add(new_user)
        db.session.commit()
        print(f"User '{username}' created successfully.")

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Deletes expired session records."""
        removed = store.purge_expired()
        print(f"Removed {removed} expired session(s).")

    app_logger.info(f"Application created ({app.config['ENV_NAME']}).")
    return app
