from flask import Blueprint, jsonify

from app.domain import ContactMessage, NewsletterSignup
from app.extensions import limiter
from app.routes.api.payload import json_object
from app.routes.api.v1.bookings import booking_rate_limit
from app.services import NotificationService

api_inquiry_bp = Blueprint("api_inquiry", __name__)


@api_inquiry_bp.post("/contact")
@limiter.limit(booking_rate_limit)
def submit_contact():
    contact = ContactMessage.from_payload(json_object())
    NotificationService.notify_contact(contact)
    return jsonify(
        {"success": True, "message": "Thank you for your message! We'll get back to you as soon as possible."}
    )


@api_inquiry_bp.post("/newsletter")
@limiter.limit(booking_rate_limit)
def subscribe_newsletter():
    signup = NewsletterSignup.from_payload(json_object())
    NotificationService.notify_newsletter(signup)
    return jsonify(
        {"success": True, "message": "Thank you for subscribing! Welcome to the Island Mystic Tours tribe! 🌴"}
    )
