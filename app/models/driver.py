from datetime import datetime, timezone

from sqlalchemy import text

from app.extensions import db
from app.models.base import PKType, SerializerMixin, TimestampMixin

DRIVER_STATUSES = ("available", "busy", "offline")
ASSIGNMENT_STATUSES = ("assigned", "completed", "cancelled")
ACTIVE_ASSIGNMENT_SQL = "assignment_status != 'cancelled'"


class Driver(SerializerMixin, TimestampMixin, db.Model):
    __tablename__ = "drivers"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    phone = db.Column(db.String(40), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    vehicle = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(24), nullable=False, default="available", index=True)

    assignments = db.relationship(
        "DriverAssignment",
        back_populates="driver",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("status IN ('available', 'busy', 'offline')", name="ck_driver_status"),
    )


class DriverAssignment(SerializerMixin, TimestampMixin, db.Model):
    __tablename__ = "driver_assignments"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    driver_id = db.Column(PKType, db.ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_kind = db.Column(db.String(16), nullable=False)
    # Canonical booking UUID; never the legacy numeric id.
    booking_ref = db.Column(db.String(36), nullable=False, index=True)
    assignment_status = db.Column(db.String(24), nullable=False, default="assigned", index=True)
    assigned_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    driver = db.relationship("Driver", back_populates="assignments")

    __table_args__ = (
        # At most one active assignment per booking, enforced by the database.
        db.Index(
            "uq_driver_assignments_active_booking",
            "booking_ref",
            unique=True,
            sqlite_where=text(ACTIVE_ASSIGNMENT_SQL),
            postgresql_where=text(ACTIVE_ASSIGNMENT_SQL),
        ),
        db.CheckConstraint("booking_kind IN ('tour', 'airport')", name="ck_assignment_booking_kind"),
        db.CheckConstraint(
            "assignment_status IN ('assigned', 'completed', 'cancelled')",
            name="ck_assignment_status",
        ),
    )

    @property
    def is_active(self):
        return self.assignment_status != "cancelled"
