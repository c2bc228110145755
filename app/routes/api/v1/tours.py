from flask import Blueprint, jsonify

from app.errors import TourNotFound
from app.extensions import cache
from app.services import TourService

api_tour_bp = Blueprint("api_tour", __name__)

PUBLIC_TOURS_CACHE_KEY = "public_tours"


def serialize_tour(tour):
    return {
        "id": tour.id,
        "title": tour.title,
        "slug": tour.slug,
        "description": tour.description,
        "price": float(tour.price),
        "duration": tour.duration,
        "location": tour.location,
    }


@api_tour_bp.get("")
@cache.cached(timeout=120, key_prefix=PUBLIC_TOURS_CACHE_KEY)
def list_tours():
    return jsonify({"success": True, "tours": [serialize_tour(t) for t in TourService.list_tours()]})


@api_tour_bp.get("/<tour_id>")
def get_tour(tour_id):
    tour = TourService.get_tour(tour_id)
    if not tour.is_active:
        raise TourNotFound(tour_id)
    return jsonify({"success": True, "tour": serialize_tour(tour)})
