import logging
from flask import Blueprint, request, redirect, url_for, render_template, current_app
from flask_login import current_user

from wanderlust.auth import login_required, owner_required, get_listing_or_404
from wanderlust.flash import flash_success
from wanderlust.models import db, Listing
from wanderlust.schemas import ListingSchema

app_logger = logging.getLogger('app')

listings_bp = Blueprint('listings', __name__)


def _load_listing_form():
    """Validates the posted listing form. Raises ValidationError."""
    data = ListingSchema().load(request.form)
    if not data.get("image_url"):
        data["image_url"] = current_app.config["DEFAULT_LISTING_IMAGE"]
    return data


@listings_bp.route("", methods=["GET"], strict_slashes=False)
def index():
    """Shows every listing, newest first."""
    all_listings = Listing.query.order_by(Listing.id.desc()).all()
    return render_template("listings/index.html", all_listings=all_listings)


@listings_bp.route("/new", methods=["GET"])
@login_required
def new():
    return render_template("listings/new.html")


@listings_bp.route("", methods=["POST"], strict_slashes=False)
@login_required
def create():
    data = _load_listing_form()
    listing = Listing(owner_id=current_user.id, **data)
    try:
        db.session.add(listing)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    app_logger.info(f"Listing {listing.id} created by {current_user.username}.")
    flash_success("New Listing Created!")
    return redirect(url_for('listings.index'))


@listings_bp.route("/<int:listing_id>", methods=["GET"])
def show(listing_id):
    listing = get_listing_or_404(listing_id)
    return render_template("listings/show.html", listing=listing)


@listings_bp.route("/<int:listing_id>/edit", methods=["GET"])
@login_required
@owner_required
def edit(listing_id):
    listing = get_listing_or_404(listing_id)
    return render_template("listings/edit.html", listing=listing)


@listings_bp.route("/<int:listing_id>", methods=["PUT", "PATCH"])
@login_required
@owner_required
def update(listing_id):
    listing = get_listing_or_404(listing_id)
    data = _load_listing_form()
    for field, value in data.items():
        setattr(listing, field, value)
    db.session.commit()
    app_logger.info(f"Listing {listing_id} updated by {current_user.username}.")
    flash_success("Listing Updated!")
    return redirect(url_for('listings.show', listing_id=listing_id))


@listings_bp.route("/<int:listing_id>", methods=["DELETE"])
@login_required
@owner_required
def destroy(listing_id):
    """Deletes the listing; its reviews go with it."""
    listing = get_listing_or_404(listing_id)
    db.session.delete(listing)
    db.session.commit()
    app_logger.info(f"Listing {listing_id} deleted by {current_user.username}.")
    flash_success("Listing Deleted!")
    return redirect(url_for('listings.index'))
