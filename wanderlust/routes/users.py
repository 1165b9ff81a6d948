import logging
from flask import Blueprint, request, redirect, url_for, render_template, current_app
from flask_login import login_user, logout_user, current_user
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from wanderlust import limiter
from wanderlust.auth import authenticate, pop_redirect_url, regenerate_session, AuthError
from wanderlust.flash import flash_success, flash_error
from wanderlust.models import db, User
from wanderlust.schemas import SignupSchema, UserLoginSchema

security_logger = logging.getLogger('security')

users_bp = Blueprint('users', __name__)


@users_bp.route("/signup", methods=["GET"])
def signup_form():
    return render_template("users/signup.html")


@users_bp.route("/signup", methods=["POST"])
def signup():
    """Registers a new user and logs them straight in."""
    try:
        data = SignupSchema().load(request.form)
    except ValidationError as err:
        flash_error(" ".join(
            f"{field}: {' '.join(messages)}" for field, messages in err.messages.items()
        ))
        return redirect(url_for('users.signup_form'))

    if User.query.filter_by(username=data['username']).first():
        flash_error("A user with the given username is already registered.")
        return redirect(url_for('users.signup_form'))

    user = User(username=data['username'], email=data['email'])
    user.set_password(data['password'])
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        flash_error("A user with the given username is already registered.")
        return redirect(url_for('users.signup_form'))

    regenerate_session()
    login_user(user)
    security_logger.info(f"New user registered: {user.username}")
    flash_success("Welcome to Wanderlust!")
    return redirect(url_for('listings.index'))


@users_bp.route("/login", methods=["GET"])
def login_form():
    return render_template("users/login.html")


@users_bp.route("/login", methods=["POST"])
@limiter.limit(lambda: current_app.config["LOGIN_RATE_LIMIT"])
def login():
    """User login endpoint."""
    try:
        credentials = UserLoginSchema().load(request.form)
    except ValidationError:
        credentials = {}

    result = authenticate(credentials)
    if isinstance(result, AuthError):
        security_logger.warning(f"Failed login attempt for username: {request.form.get('username')}")
        flash_error(result.message)
        return redirect(url_for('users.login_form'))

    regenerate_session()
    login_user(result)
    security_logger.info(f"Successful login for user: {result.username}")
    flash_success("Welcome back to Wanderlust!")
    return redirect(pop_redirect_url(url_for('listings.index')))


@users_bp.route("/logout", methods=["GET"])
def logout():
    if current_user.is_authenticated:
        security_logger.info(f"User {current_user.username} logged out.")
    logout_user()
    regenerate_session()
    flash_success("You are logged out!")
    return redirect(url_for('listings.index'))
