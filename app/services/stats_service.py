from sqlalchemy import func

from app.extensions import db
from app.models import AirportPickupBooking, Driver, DriverAssignment, Tour, TourBooking


def db_scalar(expr, *criteria):
    value = db.session.query(expr).filter(*criteria).scalar()
    return value or 0


class StatsService:
    @staticmethod
    def _status_counts(model):
        rows = db.session.query(model.status, func.count(model.id)).group_by(model.status).all()
        return {status: int(count) for status, count in rows}

    @staticmethod
    def summary():
        # Cancelled bookings never earn revenue.
        tour_revenue = db_scalar(func.sum(TourBooking.total_amount), TourBooking.status != "cancelled")
        transfer_revenue = db_scalar(
            func.sum(AirportPickupBooking.total_price), AirportPickupBooking.status != "cancelled"
        )
        return {
            "totalTours": int(db_scalar(func.count(Tour.id))),
            "totalBookings": int(db_scalar(func.count(TourBooking.id))),
            "totalPickups": int(db_scalar(func.count(AirportPickupBooking.id))),
            "totalDrivers": int(db_scalar(func.count(Driver.id))),
            "activeAssignments": int(
                db_scalar(func.count(DriverAssignment.id), DriverAssignment.assignment_status == "assigned")
            ),
            "totalRevenue": float(tour_revenue) + float(transfer_revenue),
            "bookingsByStatus": StatsService._status_counts(TourBooking),
            "pickupsByStatus": StatsService._status_counts(AirportPickupBooking),
        }
