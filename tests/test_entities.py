from datetime import date, timedelta

import pytest

from app.domain import (
    ContactMessage,
    NewsletterSignup,
    TourBookingDraft,
    TransferBookingDraft,
    clean_edit,
    require_mapping,
)
from app.domain.refs import AIRPORT, TOUR, BookingRef
from app.errors import BookingNotFound, ValidationError

TODAY = date(2024, 1, 1)


def tour_form(**overrides):
    payload = {
        "tour_id": "tour-1",
        "customer_name": "Alice Brown",
        "customer_email": "Alice@Example.com",
        "booking_date": "2024-01-10",
        "number_of_people": 2,
    }
    payload.update(overrides)
    return payload


def transfer_form(**overrides):
    payload = {
        "customer_name": "Bob Green",
        "customer_email": "bob@example.com",
        "service_type": "both",
        "passengers": 2,
        "flight_number": "AA123",
        "arrival_date": "2024-01-10",
        "arrival_time": "14:30",
        "dropoff_location": "Sandals Negril",
        "departure_flight_number": "AA124",
        "departure_date": "2024-01-17",
        "departure_time": "09:15",
        "pickup_location": "Sandals Negril",
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestTourBookingDraft:
    def test_valid_payload(self):
        draft = TourBookingDraft.from_payload(tour_form(), today=TODAY)
        assert draft.customer_email == "alice@example.com"
        assert draft.booking_date == date(2024, 1, 10)
        assert draft.number_of_people == 2

    def test_public_form_aliases(self):
        payload = {
            "tourId": "tour-1",
            "name": "Alice",
            "email": "alice@example.com",
            "date": "2024-01-05",
            "guests": "3",
            "specialRequests": "Vegetarian lunch",
        }
        draft = TourBookingDraft.from_payload(payload, today=TODAY)
        assert draft.number_of_people == 3
        assert draft.special_requests == "Vegetarian lunch"

    def test_collects_every_violation(self):
        payload = tour_form(customer_name="", customer_email="nope", booking_date="2023-12-31", number_of_people=21)
        with pytest.raises(ValidationError) as exc_info:
            TourBookingDraft.from_payload(payload, today=TODAY)
        assert set(exc_info.value.errors) == {"customer_name", "customer_email", "booking_date", "number_of_people"}

    def test_date_too_far_ahead(self):
        far = (TODAY + timedelta(days=400)).isoformat()
        with pytest.raises(ValidationError) as exc_info:
            TourBookingDraft.from_payload(tour_form(booking_date=far), today=TODAY)
        assert "booking_date" in exc_info.value.errors

    def test_server_owned_fields_are_ignored(self):
        payload = tour_form(status="confirmed", created_at="2020-01-01", total_amount=1)
        draft = TourBookingDraft.from_payload(payload, today=TODAY)
        assert not hasattr(draft, "status")
        assert "total_amount" not in draft.to_dict()


@pytest.mark.unit
class TestTransferBookingDraft:
    def test_both_requires_pickup_location(self):
        with pytest.raises(ValidationError) as exc_info:
            TransferBookingDraft.from_payload(transfer_form(pickup_location=""), today=TODAY)
        assert "pickup_location" in exc_info.value.errors

    def test_same_data_as_pickup_is_valid(self):
        draft = TransferBookingDraft.from_payload(
            transfer_form(service_type="pickup", pickup_location=""), today=TODAY
        )
        assert draft.needs_arrival and not draft.needs_departure
        assert draft.pickup_location is None

    def test_dropoff_needs_only_departure_leg(self):
        payload = transfer_form(
            service_type="dropoff", flight_number="", arrival_date="", arrival_time="", dropoff_location=""
        )
        draft = TransferBookingDraft.from_payload(payload, today=TODAY)
        assert draft.departure_date == date(2024, 1, 17)
        assert draft.arrival_date is None

    @pytest.mark.parametrize("passengers", [0, 11, "many"])
    def test_passenger_bounds(self, passengers):
        with pytest.raises(ValidationError) as exc_info:
            TransferBookingDraft.from_payload(transfer_form(passengers=passengers), today=TODAY)
        assert "passengers" in exc_info.value.errors

    def test_notes_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            TransferBookingDraft.from_payload(transfer_form(notes="x" * 501), today=TODAY)
        assert "notes" in exc_info.value.errors

    def test_past_flight_date_and_bad_time(self):
        payload = transfer_form(arrival_date="2023-12-25", departure_time="9am")
        with pytest.raises(ValidationError) as exc_info:
            TransferBookingDraft.from_payload(payload, today=TODAY)
        assert {"arrival_date", "departure_time"} <= set(exc_info.value.errors)

    def test_unknown_service_type(self):
        with pytest.raises(ValidationError) as exc_info:
            TransferBookingDraft.from_payload(transfer_form(service_type="shuttle"), today=TODAY)
        assert "service_type" in exc_info.value.errors


@pytest.mark.unit
class TestCleanEdit:
    def test_tour_edit(self):
        cleaned = clean_edit(TOUR, {"number_of_people": "4", "customer_email": "NEW@example.com"})
        assert cleaned == {"number_of_people": 4, "customer_email": "new@example.com"}

    def test_pricing_inputs_are_not_editable(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_edit(TOUR, {"tour_id": "other"})
        assert exc_info.value.errors == {"tour_id": "This field cannot be edited."}

    def test_required_leg_fields_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            clean_edit(AIRPORT, {"pickup_location": ""}, service_type="both")

    def test_unused_leg_fields_can_be_cleared(self):
        cleaned = clean_edit(AIRPORT, {"pickup_location": "", "departure_date": ""}, service_type="pickup")
        assert cleaned == {"pickup_location": None, "departure_date": None}

    def test_server_owned_fields_are_dropped(self):
        assert clean_edit(TOUR, {"status": "confirmed", "uuid": "x"}) == {}


@pytest.mark.unit
class TestBookingRef:
    def test_uuid_is_preferred_over_legacy_id(self):
        ref = BookingRef.for_record(TOUR, uuid="abc-123", legacy_id=12)
        assert str(ref) == "tour:abc-123"
        assert not ref.is_legacy

    def test_legacy_id_fallback(self):
        ref = BookingRef.for_record(AIRPORT, legacy_id=12)
        assert ref == BookingRef(AIRPORT, "12")
        assert ref.is_legacy

    def test_kinds_never_collide(self):
        assert BookingRef(TOUR, "12") != BookingRef(AIRPORT, "12")

    @pytest.mark.parametrize("raw", ["", "12", "hotel:1", "tour:", None])
    def test_parse_rejects_garbage(self, raw):
        with pytest.raises(BookingNotFound):
            BookingRef.parse(raw)

    def test_parse_round_trip(self):
        assert BookingRef.parse("airport:9f1c") == BookingRef(AIRPORT, "9f1c")

    @pytest.mark.parametrize("value", ["²", "١٢", "1²", "-1"])
    def test_only_ascii_digits_are_legacy_ids(self, value):
        assert not BookingRef(TOUR, value).is_legacy


@pytest.mark.unit
class TestNonMappingPayloads:
    @pytest.mark.parametrize("payload", [[{"tour_id": "tour-1"}], ["x"], "text", 12])
    def test_drafts_reject_non_objects(self, payload):
        for draft in (TourBookingDraft, TransferBookingDraft):
            with pytest.raises(ValidationError) as exc_info:
                draft.from_payload(payload, today=TODAY)
            assert exc_info.value.errors == {"payload": "Expected a JSON object."}

    def test_edit_rejects_non_object(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_edit(TOUR, [("customer_name", "x")])
        assert "payload" in exc_info.value.errors

    def test_none_is_an_empty_payload(self):
        assert require_mapping(None) == {}


@pytest.mark.unit
class TestContactMessage:
    def test_valid_message(self):
        contact = ContactMessage.from_payload(
            {
                "name": "Carla",
                "email": "Carla@Example.com",
                "subject": "Custom Tour Request",
                "message": "Can we add a waterfall stop?",
            }
        )
        assert contact.email == "carla@example.com"
        assert contact.subject == "Custom Tour Request"

    def test_collects_every_violation(self):
        with pytest.raises(ValidationError) as exc_info:
            ContactMessage.from_payload({"name": "C", "email": "nope", "subject": "Refund", "message": "hi"})
        assert set(exc_info.value.errors) == {"name", "email", "subject", "message"}


@pytest.mark.unit
class TestNewsletterSignup:
    def test_valid_email(self):
        assert NewsletterSignup.from_payload({"email": " Fan@Example.com "}).email == "fan@example.com"

    @pytest.mark.parametrize("payload", [{}, {"email": "fan.example.com"}])
    def test_invalid_email(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            NewsletterSignup.from_payload(payload)
        assert set(exc_info.value.errors) == {"email"}
