from app.services.assignment_service import AssignmentService
from app.services.booking_service import BookingService
from app.services.driver_service import DriverService
from app.services.notification_service import NotificationService
from app.services.stats_service import StatsService
from app.services.tour_service import TourService

__all__ = [
    "AssignmentService",
    "BookingService",
    "DriverService",
    "NotificationService",
    "StatsService",
    "TourService",
]
