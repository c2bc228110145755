import logging

from flask import current_app
from sqlalchemy import update

from app.domain import (
    CANCELLED,
    CONFIRMED,
    TOUR,
    BookingRef,
    TourBookingDraft,
    TransferBookingDraft,
    TransitionEngine,
    clean_edit,
    merge_and_filter,
    price_for_tour,
    price_for_transfer,
    require_mapping,
)
from app.errors import BookingNotFound, TourNotFound, ValidationError
from app.extensions import db
from app.models import BOOKING_MODELS, AirportPickupBooking, DriverAssignment, Tour, TourBooking
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class BookingService:
    @staticmethod
    def engine():
        return TransitionEngine(
            allow_manual_confirmation=current_app.config.get("ALLOW_MANUAL_CONFIRMATION", False)
        )

    @staticmethod
    def _max_days_ahead():
        return current_app.config.get("BOOKING_MAX_DAYS_AHEAD", 365)

    @staticmethod
    def resolve(ref):
        """Load the booking behind ``ref`` (a ``BookingRef`` or ``"kind:value"``)."""
        if not isinstance(ref, BookingRef):
            ref = BookingRef.parse(str(ref))
        model = BOOKING_MODELS[ref.kind]
        booking = model.query.filter_by(uuid=ref.value).first()
        if booking is None and ref.is_legacy:
            # Legacy numeric ids are honoured only when no UUID matched.
            booking = db.session.get(model, int(ref.value))
        if booking is None:
            raise BookingNotFound(ref)
        return booking

    @staticmethod
    def create_tour_booking(payload, created_by_staff=False, notify=True):
        draft = TourBookingDraft.from_payload(payload, max_days_ahead=BookingService._max_days_ahead())
        tour = db.session.get(Tour, draft.tour_id)
        if not tour or not tour.is_active:
            raise TourNotFound(draft.tour_id)

        booking = TourBooking(
            tour_id=tour.id,
            customer_name=draft.customer_name,
            customer_email=draft.customer_email,
            customer_phone=draft.customer_phone,
            booking_date=draft.booking_date,
            number_of_people=draft.number_of_people,
            special_requests=draft.special_requests,
            total_amount=price_for_tour(tour, draft.number_of_people),
            status="pending",
            created_by_staff=bool(created_by_staff),
        )
        db.session.add(booking)
        db.session.commit()
        logger.info("Tour booking %s created for tour %s (%s guests).", booking.ref, tour.id, booking.number_of_people)

        if notify:
            NotificationService.notify_booking_created(booking)
        return booking

    @staticmethod
    def create_airport_booking(payload, notify=True):
        draft = TransferBookingDraft.from_payload(payload, max_days_ahead=BookingService._max_days_ahead())
        fields = draft.to_dict()
        booking = AirportPickupBooking(
            **fields,
            total_price=price_for_transfer(draft.service_type),
            status="pending",
        )
        db.session.add(booking)
        db.session.commit()
        logger.info("Airport booking %s created (%s).", booking.ref, booking.service_type)

        if notify:
            NotificationService.notify_booking_created(booking)
        return booking

    @staticmethod
    def list_bookings(filters=None, limit=None):
        limit = limit or current_app.config.get("ADMIN_BOOKING_LIST_LIMIT", 100)
        tours = TourBooking.query.order_by(TourBooking.created_at.desc()).limit(limit).all()
        transfers = AirportPickupBooking.query.order_by(AirportPickupBooking.created_at.desc()).limit(limit).all()
        return merge_and_filter(tours, transfers, filters)

    @staticmethod
    def update_booking(ref, changes):
        booking = BookingService.resolve(ref)
        changes = dict(require_mapping(changes))
        target_status = changes.pop("status", None)
        cleaned = clean_edit(booking.kind, changes, service_type=getattr(booking, "service_type", None))

        if target_status is not None:
            engine = BookingService.engine()
            # A bare edit never carries an assignment, so it cannot confirm.
            target = engine.check(booking.status, str(target_status))
            if target == CANCELLED and booking.status != CANCELLED:
                BookingService._mark_cancelled(booking)
            else:
                engine.apply(booking, target)

        for key, value in cleaned.items():
            setattr(booking, key, value)
        db.session.commit()
        return booking

    @staticmethod
    def cancel_booking(ref):
        booking = BookingService.resolve(ref)
        BookingService.engine().check(booking.status, CANCELLED)
        if booking.status == CANCELLED:
            return booking
        BookingService._mark_cancelled(booking)
        db.session.commit()
        logger.info("Booking %s cancelled.", booking.ref)
        return booking

    @staticmethod
    def confirm_manually(ref):
        """Confirm without a driver; only when manual confirmation is enabled."""
        booking = BookingService.resolve(ref)
        changed = BookingService.engine().apply(booking, CONFIRMED, manual=True)
        db.session.commit()
        if changed:
            logger.info("Booking %s confirmed manually without a driver.", booking.ref)
        return booking

    @staticmethod
    def reprice(ref):
        booking = BookingService.resolve(ref)
        if booking.kind == TOUR:
            if booking.tour is None:
                raise ValidationError({"tour_id": "The booked tour no longer exists; the price cannot be recomputed."})
            booking.total_amount = price_for_tour(booking.tour, booking.number_of_people)
        else:
            booking.total_price = price_for_transfer(booking.service_type)
        db.session.commit()
        return booking

    @staticmethod
    def delete_booking(ref):
        booking = BookingService.resolve(ref)
        booking_ref = booking.ref
        DriverAssignment.query.filter_by(booking_ref=booking.uuid).delete(synchronize_session=False)
        db.session.delete(booking)
        db.session.commit()
        logger.info("Booking %s deleted.", booking_ref)
        return booking_ref

    @staticmethod
    def _mark_cancelled(booking):
        """Compare-and-set the row to ``cancelled``, then release its driver.

        The status is written first: an assignment racing with the cancel has
        either committed already, and is released here, or fails its own
        compare-and-set on the cancelled row.
        """
        ref = booking.ref
        model = BOOKING_MODELS[booking.kind]
        sources = TransitionEngine.sources_for(CANCELLED)
        result = db.session.execute(
            update(model)
            .where(model.id == booking.id, model.status.in_(sorted(sources)))
            .values(status=CANCELLED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            raise BookingNotFound(ref)
        BookingService._cancel_active_assignment(booking)

    @staticmethod
    def _cancel_active_assignment(booking):
        active = (
            DriverAssignment.query.filter_by(booking_ref=booking.uuid)
            .filter(DriverAssignment.assignment_status != "cancelled")
            .all()
        )
        for assignment in active:
            assignment.assignment_status = "cancelled"

