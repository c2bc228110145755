from flask import Blueprint

from app.routes.api.v1.bookings import api_booking_bp
from app.routes.api.v1.inquiries import api_inquiry_bp
from app.routes.api.v1.tours import api_tour_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_tour_bp, url_prefix="/tours")
api_v1_bp.register_blueprint(api_booking_bp, url_prefix="/bookings")
api_v1_bp.register_blueprint(api_inquiry_bp)
