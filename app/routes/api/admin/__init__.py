from flask import Blueprint

from app.routes.api.admin.assignments import admin_assignment_bp
from app.routes.api.admin.bookings import admin_booking_bp
from app.routes.api.admin.drivers import admin_driver_bp
from app.routes.api.admin.stats import admin_stats_bp
from app.routes.api.admin.tours import admin_tour_bp

api_admin_bp = Blueprint("api_admin", __name__)
api_admin_bp.register_blueprint(admin_booking_bp, url_prefix="/bookings")
api_admin_bp.register_blueprint(admin_tour_bp, url_prefix="/tours")
api_admin_bp.register_blueprint(admin_driver_bp, url_prefix="/drivers")
api_admin_bp.register_blueprint(admin_assignment_bp, url_prefix="/driver-assignments")
api_admin_bp.register_blueprint(admin_stats_bp, url_prefix="/stats")
