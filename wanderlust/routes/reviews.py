import logging
from flask import Blueprint, request, redirect, url_for
from flask_login import current_user

from wanderlust.auth import login_required, author_required, get_listing_or_404
from wanderlust.flash import flash_success
from wanderlust.models import db, Review
from wanderlust.schemas import ReviewSchema

app_logger = logging.getLogger('app')

# Mounted under /listings/<int:listing_id>/reviews
reviews_bp = Blueprint('reviews', __name__)


@reviews_bp.route("", methods=["POST"])
@login_required
def create(listing_id):
    listing = get_listing_or_404(listing_id)
    data = ReviewSchema().load(request.form)
    review = Review(author_id=current_user.id, listing=listing, **data)
    db.session.add(review)
    db.session.commit()
    app_logger.info(f"Review {review.id} added to listing {listing_id} by {current_user.username}.")
    flash_success("New Review Created!")
    return redirect(url_for('listings.show', listing_id=listing_id))


@reviews_bp.route("/<int:review_id>", methods=["DELETE"])
@login_required
@author_required
def destroy(listing_id, review_id):
    review = db.session.get(Review, review_id)
    db.session.delete(review)
    db.session.commit()
    app_logger.info(f"Review {review_id} removed from listing {listing_id}.")
    flash_success("Review Deleted!")
    return redirect(url_for('listings.show', listing_id=listing_id))
