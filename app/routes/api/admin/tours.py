from flask import Blueprint, jsonify, request

from app.extensions import cache
from app.routes.api.payload import json_object
from app.routes.api.v1.tours import PUBLIC_TOURS_CACHE_KEY
from app.services import TourService

admin_tour_bp = Blueprint("admin_tour", __name__)


def _invalidate_public_tours():
    cache.delete(PUBLIC_TOURS_CACHE_KEY)


@admin_tour_bp.get("")
def list_tours():
    include_inactive = request.args.get("include_inactive", "true").lower() == "true"
    tours = TourService.list_tours(active_only=not include_inactive)
    return jsonify({"success": True, "tours": [t.to_dict() for t in tours]})


@admin_tour_bp.post("")
def create_tour():
    tour = TourService.create_tour(json_object())
    _invalidate_public_tours()
    return jsonify({"success": True, "tour": tour.to_dict()}), 201


@admin_tour_bp.patch("/<tour_id>")
def update_tour(tour_id):
    tour = TourService.update_tour(tour_id, json_object())
    _invalidate_public_tours()
    return jsonify({"success": True, "tour": tour.to_dict()})


@admin_tour_bp.delete("/<tour_id>")
def delete_tour(tour_id):
    TourService.delete_tour(tour_id)
    _invalidate_public_tours()
    return jsonify({"success": True})
