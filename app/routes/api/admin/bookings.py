from flask import Blueprint, jsonify, request

from app.config import parse_flag
from app.routes.api.payload import json_object
from app.services import BookingService

admin_booking_bp = Blueprint("admin_booking", __name__)


@admin_booking_bp.get("")
def list_bookings():
    view = BookingService.list_bookings(
        filters={
            "search": request.args.get("search", ""),
            "kind": request.args.get("kind") or request.args.get("type") or "all",
            "status": request.args.get("status", "all"),
        }
    )
    rows = view.to_list()
    return jsonify({"success": True, "bookings": rows, "total": len(rows)})


@admin_booking_bp.post("")
def create_booking():
    payload = json_object()
    notify = parse_flag(payload.pop("notify", None), default=True)
    booking = BookingService.create_tour_booking(payload, created_by_staff=True, notify=notify)
    return jsonify({"success": True, "booking": booking.to_dict()}), 201


@admin_booking_bp.get("/<ref>")
def get_booking(ref):
    booking = BookingService.resolve(ref)
    return jsonify({"success": True, "booking": booking.to_dict()})


@admin_booking_bp.patch("/<ref>")
def update_booking(ref):
    payload = json_object()
    booking = BookingService.update_booking(ref, payload)
    return jsonify({"success": True, "booking": booking.to_dict()})


@admin_booking_bp.delete("/<ref>")
def delete_booking(ref):
    deleted = BookingService.delete_booking(ref)
    return jsonify({"success": True, "deleted": str(deleted)})


@admin_booking_bp.post("/<ref>/cancel")
def cancel_booking(ref):
    booking = BookingService.cancel_booking(ref)
    return jsonify({"success": True, "booking": booking.to_dict()})


@admin_booking_bp.post("/<ref>/confirm")
def confirm_booking(ref):
    booking = BookingService.confirm_manually(ref)
    return jsonify({"success": True, "booking": booking.to_dict()})


@admin_booking_bp.post("/<ref>/reprice")
def reprice_booking(ref):
    booking = BookingService.reprice(ref)
    return jsonify({"success": True, "booking": booking.to_dict()})
