"""Shared fixtures: an app on an in-memory database and helpers to log in.

Requests must not run inside an app context pushed by the test, otherwise
``g`` (and the user cached on it by Flask-Login) would leak between
requests. Helpers therefore open their own short-lived contexts and hand
back ids rather than ORM objects.
"""

import pytest
from flask import template_rendered

from wanderlust import create_app, db
from wanderlust.config import TestConfig
from wanderlust.models import User, Listing, Review

PASSWORD = "s3cret-pass"


@pytest.fixture
def config_class(tmp_path):
    class _Config(TestConfig):
        LOG_DIR = str(tmp_path / "logs")
    return _Config


@pytest.fixture
def app(config_class):
    app = create_app(config_class)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def captured_templates(app):
    """Records (template name, context) for every render."""
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template.name, context))

    template_rendered.connect(record, app)
    try:
        yield recorded
    finally:
        template_rendered.disconnect(record, app)


def make_user(app, username="alice", password=PASSWORD, email=None):
    with app.app_context():
        user = User(username=username, email=email or f"{username}@example.com")
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def make_listing(app, owner_id, **overrides):
    fields = {
        "title": "Cozy Beachfront Cottage",
        "description": "Escape to this charming beachfront cottage.",
        "image_url": "https://example.com/cottage.jpg",
        "price": 1500,
        "location": "Malibu",
        "country": "United States",
    }
    fields.update(overrides)
    with app.app_context():
        listing = Listing(owner_id=owner_id, **fields)
        db.session.add(listing)
        db.session.commit()
        return listing.id


def make_review(app, listing_id, author_id, comment="Lovely stay", rating=5):
    with app.app_context():
        review = Review(listing_id=listing_id, author_id=author_id, comment=comment, rating=rating)
        db.session.add(review)
        db.session.commit()
        return review.id


def login(client, username="alice", password=PASSWORD):
    return client.post("/login", data={"username": username, "password": password})


def last_context(captured_templates):
    assert captured_templates, "nothing was rendered"
    return captured_templates[-1][1]


@pytest.fixture
def user_id(app):
    return make_user(app)


@pytest.fixture
def logged_in_client(client, user_id):
    login(client)
    # Consume the welcome flash so tests start from an empty queue
    client.get("/listings")
    return client
