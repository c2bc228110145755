from decimal import Decimal, InvalidOperation
import re

from app.config import parse_flag
from app.errors import TourNotFound, ValidationError
from app.extensions import db
from app.models import Tour, TourBooking


class TourService:
    EDITABLE_FIELDS = {"title", "slug", "description", "price", "duration", "location", "is_active"}

    @staticmethod
    def _slugify(value):
        slug = re.sub(r"[^a-z0-9]+", "-", (value or "").strip().lower()).strip("-")
        return slug or None

    @staticmethod
    def _parse_price(value, errors):
        try:
            price = Decimal(str(value))
            if price < 0 or not price.is_finite():
                raise ValueError
        except (InvalidOperation, ValueError):
            errors["price"] = "Price must be a non-negative number."
            return None
        return price

    @staticmethod
    def _unique_slug(base, exclude_id=None):
        candidate = base
        suffix = 2
        while True:
            query = Tour.query.filter_by(slug=candidate)
            if exclude_id is not None:
                query = query.filter(Tour.id != exclude_id)
            if not query.first():
                return candidate
            candidate = f"{base}-{suffix}"
            suffix += 1

    @staticmethod
    def list_tours(active_only=True):
        query = Tour.query.order_by(Tour.title.asc())
        if active_only:
            query = query.filter_by(is_active=True)
        return query.all()

    @staticmethod
    def get_tour(tour_id):
        tour = db.session.get(Tour, str(tour_id)) if tour_id else None
        if not tour:
            raise TourNotFound(tour_id)
        return tour

    @staticmethod
    def create_tour(payload):
        errors = {}
        title = (payload.get("title") or "").strip()
        if not title:
            errors["title"] = "Tour title is required."
        price = TourService._parse_price(payload.get("price"), errors)
        slug = TourService._slugify(payload.get("slug") or title)
        if errors:
            raise ValidationError(errors)

        tour = Tour(
            title=title,
            slug=TourService._unique_slug(slug),
            description=(payload.get("description") or "").strip() or None,
            price=price,
            duration=(payload.get("duration") or "").strip() or None,
            location=(payload.get("location") or "").strip() or None,
            is_active=parse_flag(payload.get("is_active"), default=True),
        )
        db.session.add(tour)
        db.session.commit()
        return tour

    @staticmethod
    def update_tour(tour_id, payload):
        tour = TourService.get_tour(tour_id)
        errors = {}
        for key, value in (payload or {}).items():
            if key not in TourService.EDITABLE_FIELDS:
                errors[key] = "This field cannot be edited."
            elif key == "title":
                if not (value or "").strip():
                    errors[key] = "Tour title is required."
                else:
                    tour.title = value.strip()
            elif key == "price":
                price = TourService._parse_price(value, errors)
                if price is not None:
                    # Existing bookings keep the price they were quoted.
                    tour.price = price
            elif key == "slug":
                slug = TourService._slugify(value)
                if not slug:
                    errors[key] = "Slug is required."
                else:
                    tour.slug = TourService._unique_slug(slug, exclude_id=tour.id)
            elif key == "is_active":
                tour.is_active = parse_flag(value)
            else:
                setattr(tour, key, (value or "").strip() or None)
        if errors:
            db.session.rollback()
            raise ValidationError(errors)
        db.session.commit()
        return tour

    @staticmethod
    def delete_tour(tour_id):
        tour = TourService.get_tour(tour_id)
        # Bookings outlive the catalog entry; their tour reference becomes null.
        TourBooking.query.filter_by(tour_id=tour.id).update({"tour_id": None}, synchronize_session=False)
        db.session.delete(tour)
        db.session.commit()
