from flask import Blueprint, current_app, jsonify

from app.extensions import limiter
from app.routes.api.payload import json_object
from app.services import BookingService

api_booking_bp = Blueprint("api_booking", __name__)


def booking_rate_limit():
    return current_app.config["BOOKING_RATELIMIT"]


@api_booking_bp.post("/tour")
@limiter.limit(booking_rate_limit)
def create_tour_booking():
    payload = json_object()
    booking = BookingService.create_tour_booking(payload)
    return (
        jsonify(
            {
                "success": True,
                "message": "Booking created successfully! We'll contact you shortly to confirm.",
                "booking": booking.to_dict(),
            }
        ),
        201,
    )


@api_booking_bp.post("/airport")
@limiter.limit(booking_rate_limit)
def create_airport_booking():
    payload = json_object()
    booking = BookingService.create_airport_booking(payload)
    return (
        jsonify(
            {
                "success": True,
                "message": "Thank you for your booking! We will contact you shortly to confirm.",
                "bookingId": str(booking.ref),
                "booking": booking.to_dict(),
            }
        ),
        201,
    )
