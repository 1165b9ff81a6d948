from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, LargeBinary
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash

# Keep loaded attributes usable after the session store commits at the end of a request
db = SQLAlchemy(session_options={"expire_on_commit": False})


class User(UserMixin, db.Model):
    """A registered member who can own listings and write reviews."""
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(80), unique=True, nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)

    listings = db.relationship("Listing", back_populates="owner")
    reviews = db.relationship("Review", back_populates="author")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __str__(self):
        return self.username


class Listing(db.Model):
    """A property offered on the marketplace."""
    __tablename__ = "listings"
    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=False)
    price = Column(Integer, nullable=False)
    location = Column(String(200), nullable=False)
    country = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    owner = db.relationship("User", back_populates="listings")

    reviews = db.relationship(
        "Review",
        back_populates="listing",
        order_by="Review.id",
        cascade="all, delete-orphan",
    )

    def __str__(self):
        return f"{self.title} ({self.location}, {self.country})"


class Review(db.Model):
    __tablename__ = "reviews"
    id = Column(Integer, primary_key=True)
    comment = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    author = db.relationship("User", back_populates="reviews")

    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False)
    listing = db.relationship("Listing", back_populates="reviews")


class StoredSession(db.Model):
    """Server-side session record; the payload is encrypted at rest."""
    __tablename__ = "sessions"
    sid = Column(String(64), primary_key=True)
    payload = Column(LargeBinary, nullable=False)
    issued_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
