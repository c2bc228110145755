import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.domain import CONFIRMED, TransitionEngine, merge_and_filter
from app.domain.refs import AIRPORT, TOUR
from app.errors import AlreadyAssigned, AppError, AssignmentNotFound, InvalidTransition, PartialFailure, ValidationError
from app.extensions import db
from app.models import BOOKING_MODELS, AirportPickupBooking, Driver, DriverAssignment, TourBooking
from app.services.booking_service import BookingService
from app.services.driver_service import DriverService

logger = logging.getLogger(__name__)

ASSIGNMENT_TRANSITIONS = {
    "assigned": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


class AssignmentService:
    @staticmethod
    def active_assignment_for(booking_uuid):
        return (
            DriverAssignment.query.filter_by(booking_ref=booking_uuid)
            .filter(DriverAssignment.assignment_status != "cancelled")
            .first()
        )

    @staticmethod
    def assign(booking_ref, driver_id):
        """Assign a driver and confirm the booking as one unit.

        Returns ``(booking, assignment)``. Either both the assignment row and
        the ``confirmed`` status are committed, or neither is.
        """
        booking = BookingService.resolve(booking_ref)
        driver = DriverService.get_driver(driver_id)
        ref = booking.ref

        # Raises for cancelled bookings; confirmed -> confirmed is a no-op.
        TransitionEngine().check(booking.status, CONFIRMED, via_assignment=True)
        if AssignmentService.active_assignment_for(booking.uuid):
            raise AlreadyAssigned(ref)

        model = BOOKING_MODELS[booking.kind]
        sources = TransitionEngine.sources_for(CONFIRMED, via_assignment=True)
        assignment = DriverAssignment(
            driver_id=driver.id,
            booking_kind=booking.kind,
            booking_ref=booking.uuid,
            assignment_status="assigned",
        )
        try:
            db.session.add(assignment)
            db.session.flush()
            # Compare-and-set: only moves the row if nobody cancelled it meanwhile.
            result = db.session.execute(
                update(model)
                .where(model.id == booking.id, model.status.in_(sorted(sources)))
                .values(status=CONFIRMED)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidTransition(booking.status, CONFIRMED)
            db.session.commit()
        except IntegrityError as exc:
            AssignmentService._rollback(ref)
            raise AlreadyAssigned(ref) from exc
        except InvalidTransition:
            AssignmentService._rollback(ref)
            raise
        except SQLAlchemyError as exc:
            AssignmentService._rollback(ref)
            raise AppError("Driver assignment could not be saved.", 500) from exc

        db.session.refresh(booking)
        logger.info("Driver %s assigned to booking %s.", driver.id, ref)
        return booking, assignment

    @staticmethod
    def _rollback(ref):
        try:
            db.session.rollback()
        except SQLAlchemyError as exc:
            logger.critical(
                "Rollback failed while assigning a driver to booking %s; manual reconciliation required.",
                ref,
            )
            raise PartialFailure(f"Assignment for booking {ref} may be half-applied.") from exc

    @staticmethod
    def get_assignment(assignment_id):
        assignment = db.session.get(DriverAssignment, assignment_id)
        if not assignment:
            raise AssignmentNotFound(assignment_id)
        return assignment

    @staticmethod
    def update_assignment_status(assignment_id, status):
        assignment = AssignmentService.get_assignment(assignment_id)
        target = (status or "").strip().lower()
        current = assignment.assignment_status
        if target == current:
            return assignment
        if target not in ASSIGNMENT_TRANSITIONS.get(current, set()):
            raise ValidationError({"assignment_status": f"Cannot move an assignment from {current} to {target}."})
        # Cancelling frees the booking for a new driver; it stays confirmed.
        assignment.assignment_status = target
        db.session.commit()
        return assignment

    @staticmethod
    def _bookings_by_uuid(uuids):
        uuids = list(uuids)
        if not uuids:
            return {}
        rows = {}
        for model in (TourBooking, AirportPickupBooking):
            for booking in model.query.filter(model.uuid.in_(uuids)).all():
                rows[booking.uuid] = booking
        return rows

    @staticmethod
    def list_assignments():
        assignments = DriverAssignment.query.order_by(DriverAssignment.assigned_at.desc()).all()
        drivers = {driver.id: driver for driver in Driver.query.all()}
        bookings = AssignmentService._bookings_by_uuid(a.booking_ref for a in assignments)
        rows = []
        for assignment in assignments:
            driver = drivers.get(assignment.driver_id)
            booking = bookings.get(assignment.booking_ref)
            rows.append(
                {
                    "id": assignment.id,
                    "driver_id": assignment.driver_id,
                    "driver_name": driver.name if driver else "Unknown",
                    "booking_ref": f"{assignment.booking_kind}:{assignment.booking_ref}",
                    "booking_type": assignment.booking_kind,
                    "customer_name": booking.customer_name if booking else "Unknown",
                    "date": booking.service_date.isoformat() if booking and booking.service_date else None,
                    "assignment_status": assignment.assignment_status,
                    "assigned_at": assignment.assigned_at.isoformat(),
                }
            )
        return rows

    @staticmethod
    def jobs_for_driver(driver_id):
        driver = DriverService.get_driver(driver_id)
        assignments = driver.assignments.order_by(DriverAssignment.assigned_at.desc()).all()
        by_kind = {TOUR: [], AIRPORT: []}
        for assignment in assignments:
            by_kind[assignment.booking_kind].append(assignment.booking_ref)

        tours = TourBooking.query.filter(TourBooking.uuid.in_(by_kind[TOUR])).all() if by_kind[TOUR] else []
        transfers = (
            AirportPickupBooking.query.filter(AirportPickupBooking.uuid.in_(by_kind[AIRPORT])).all()
            if by_kind[AIRPORT]
            else []
        )
        jobs = [
            {
                "ref": str(row.ref),
                "type": row.kind,
                "customer_name": row.customer_name,
                "date": row.service_date,
                "status": row.status,
                "amount": row.amount,
            }
            for row in merge_and_filter(tours, transfers)
        ]
        jobs.sort(key=lambda job: job["date"] or "", reverse=True)
        return jobs
