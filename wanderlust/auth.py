"""Authentication: credential strategies, Flask-Login wiring and view guards."""

import functools
import logging
from dataclasses import dataclass
from typing import Mapping, Protocol

from flask import current_app, redirect, request, session, url_for
from flask_login import LoginManager, current_user

from wanderlust.flash import flash_error
from wanderlust.models import db, User, Listing, Review
from wanderlust.exceptions import AppError

security_logger = logging.getLogger('security')

REDIRECT_URL_KEY = "redirect_url"
STRATEGY_EXTENSION = "wanderlust.auth"

login_manager = LoginManager()


@dataclass(frozen=True)
class AuthError:
    """A failed credential check. Returned, not raised."""
    message: str = "Invalid username or password."


class CredentialStrategy(Protocol):
    def verify(self, credentials: Mapping[str, str]) -> int | AuthError:
        ...


class PasswordStrategy:
    """Checks a username/password pair against the stored salted hash."""

    def verify(self, credentials: Mapping[str, str]) -> int | AuthError:
        username = credentials.get("username")
        password = credentials.get("password")
        if not username or not password:
            return AuthError()
        user = User.query.filter_by(username=username).first()
        if user is None or not user.check_password(password):
            return AuthError()
        return user.id


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


def init_auth(app, strategy: CredentialStrategy | None = None):
    login_manager.init_app(app)
    app.extensions[STRATEGY_EXTENSION] = strategy or PasswordStrategy()


def authenticate(credentials: Mapping[str, str]) -> User | AuthError:
    """Runs the app's credential strategy and resolves the user on success."""
    result = current_app.extensions[STRATEGY_EXTENSION].verify(credentials)
    if isinstance(result, AuthError):
        return result
    user = db.session.get(User, result)
    if user is None:
        return AuthError()
    return user


def pop_redirect_url(default):
    return session.pop(REDIRECT_URL_KEY, None) or default


def regenerate_session():
    """Issues a new session id for the current session, keeping its data."""
    current_app.session_interface.regenerate(session._get_current_object())


def login_required(view):
    """View decorator that sends anonymous users to the login page."""
    @functools.wraps(view)
    def wrapped_view(**kwargs):
        if not current_user.is_authenticated:
            if request.method == "GET":
                session[REDIRECT_URL_KEY] = request.full_path.rstrip("?")
            flash_error("You must be logged in to do that.")
            return redirect(url_for('users.login_form'))
        return view(**kwargs)
    return wrapped_view


def get_listing_or_404(listing_id):
    listing = db.session.get(Listing, listing_id)
    if listing is None:
        raise AppError(404, "Listing you requested for does not exist!")
    return listing


def owner_required(view):
    """Only the listing's owner may continue. Apply after login_required."""
    @functools.wraps(view)
    def wrapped_view(listing_id, **kwargs):
        listing = get_listing_or_404(listing_id)
        if listing.owner_id != current_user.id:
            security_logger.warning(
                f"User {current_user.username} tried to modify listing {listing_id} they do not own."
            )
            flash_error("You are not the owner of this listing.")
            return redirect(url_for('listings.show', listing_id=listing_id))
        return view(listing_id=listing_id, **kwargs)
    return wrapped_view


def author_required(view):
    """Only the review's author may continue. Apply after login_required."""
    @functools.wraps(view)
    def wrapped_view(listing_id, review_id, **kwargs):
        review = db.session.get(Review, review_id)
        if review is None or review.listing_id != listing_id:
            raise AppError(404, "Review not found.")
        if review.author_id != current_user.id:
            security_logger.warning(
                f"User {current_user.username} tried to delete review {review_id} they did not write."
            )
            flash_error("You are not the author of this review.")
            return redirect(url_for('listings.show', listing_id=listing_id))
        return view(listing_id=listing_id, review_id=review_id, **kwargs)
    return wrapped_view
