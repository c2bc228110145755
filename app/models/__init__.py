from app.models.booking import BOOKING_MODELS, AirportPickupBooking, TourBooking
from app.models.driver import Driver, DriverAssignment
from app.models.tour import Tour

__all__ = [
    "Tour",
    "TourBooking",
    "AirportPickupBooking",
    "BOOKING_MODELS",
    "Driver",
    "DriverAssignment",
]
