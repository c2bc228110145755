from app.extensions import db
from app.models.base import SerializerMixin, TimestampMixin, new_uuid


class Tour(SerializerMixin, TimestampMixin, db.Model):
    __tablename__ = "tours"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    title = db.Column(db.String(160), nullable=False)
    slug = db.Column(db.String(180), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration = db.Column(db.String(60), nullable=True)
    location = db.Column(db.String(160), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    bookings = db.relationship("TourBooking", back_populates="tour", lazy="dynamic", passive_deletes=True)

    __table_args__ = (db.CheckConstraint("price >= 0", name="ck_tour_price_non_negative"),)
