from app.domain.refs import AIRPORT, TOUR, BookingRef
from app.extensions import db
from app.models.base import PKType, SerializerMixin, TimestampMixin, new_uuid


class BookingMixin(SerializerMixin, TimestampMixin):
    id = db.Column(PKType, primary_key=True, autoincrement=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, index=True, default=new_uuid)
    customer_name = db.Column(db.String(120), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_phone = db.Column(db.String(40), nullable=True)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)

    kind = None

    @property
    def ref(self):
        return BookingRef.for_record(self.kind, uuid=self.uuid, legacy_id=self.id)


class TourBooking(BookingMixin, db.Model):
    __tablename__ = "bookings"

    kind = TOUR

    tour_id = db.Column(db.String(36), db.ForeignKey("tours.id", ondelete="SET NULL"), nullable=True, index=True)
    booking_date = db.Column(db.Date, nullable=False)
    number_of_people = db.Column(db.Integer, nullable=False)
    special_requests = db.Column(db.Text, nullable=True)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    created_by_staff = db.Column(db.Boolean, nullable=False, default=False)

    tour = db.relationship("Tour", back_populates="bookings")

    __table_args__ = (
        db.Index("ix_bookings_status_created", "status", "created_at"),
        db.CheckConstraint("number_of_people BETWEEN 1 AND 20", name="ck_booking_people_range"),
        db.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name="ck_booking_status"),
    )

    @property
    def amount(self):
        return self.total_amount

    @property
    def service_date(self):
        return self.booking_date

    def to_dict(self):
        payload = super().to_dict()
        payload["kind"] = self.kind
        payload["ref"] = str(self.ref)
        payload["tour_title"] = self.tour.title if self.tour else None
        return payload


class AirportPickupBooking(BookingMixin, db.Model):
    __tablename__ = "airport_pickup_bookings"

    kind = AIRPORT

    service_type = db.Column(db.String(16), nullable=False, index=True)
    flight_number = db.Column(db.String(20), nullable=True)
    arrival_date = db.Column(db.Date, nullable=True)
    arrival_time = db.Column(db.String(8), nullable=True)
    dropoff_location = db.Column(db.String(255), nullable=True)
    departure_flight_number = db.Column(db.String(20), nullable=True)
    departure_date = db.Column(db.Date, nullable=True)
    departure_time = db.Column(db.String(8), nullable=True)
    pickup_location = db.Column(db.String(255), nullable=True)
    passengers = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.String(500), nullable=True)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    __table_args__ = (
        db.Index("ix_airport_pickup_bookings_status_created", "status", "created_at"),
        db.CheckConstraint("passengers BETWEEN 1 AND 10", name="ck_airport_passengers_range"),
        db.CheckConstraint("service_type IN ('pickup', 'dropoff', 'both')", name="ck_airport_service_type"),
        db.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name="ck_airport_status"),
    )

    @property
    def amount(self):
        return self.total_price

    @property
    def service_date(self):
        return self.arrival_date or self.departure_date

    def to_dict(self):
        payload = super().to_dict()
        payload["kind"] = self.kind
        payload["ref"] = str(self.ref)
        return payload


BOOKING_MODELS = {TOUR: TourBooking, AIRPORT: AirportPickupBooking}
