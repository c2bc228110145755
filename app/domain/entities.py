import re
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

from app.domain.pricing import MAX_TOUR_PEOPLE, MIN_TOUR_PEOPLE, TRANSFER_PRICES
from app.domain.refs import TOUR
from app.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")

MIN_PASSENGERS = 1
MAX_PASSENGERS = 10
MAX_NOTES_LENGTH = 500

MIN_CONTACT_NAME_LENGTH = 2
MIN_CONTACT_MESSAGE_LENGTH = 10
CONTACT_SUBJECTS = ("Tour Inquiry", "Booking Question", "Custom Tour Request", "General Question")

ARRIVAL_FIELDS = ("flight_number", "arrival_date", "arrival_time", "dropoff_location")
DEPARTURE_FIELDS = ("departure_flight_number", "departure_date", "departure_time", "pickup_location")
ARRIVAL_SERVICES = {"pickup", "both"}
DEPARTURE_SERVICES = {"dropoff", "both"}

# Server-owned columns; silently dropped from any submitted payload.
SERVER_OWNED_FIELDS = {"id", "uuid", "status", "created_at", "updated_at", "total_amount", "total_price"}

# Public form field names mapped onto the stored column names.
TOUR_FIELD_ALIASES = {
    "tourId": "tour_id",
    "name": "customer_name",
    "email": "customer_email",
    "phone": "customer_phone",
    "date": "booking_date",
    "guests": "number_of_people",
    "specialRequests": "special_requests",
}

TOUR_EDITABLE_FIELDS = {
    "customer_name",
    "customer_email",
    "customer_phone",
    "booking_date",
    "number_of_people",
    "special_requests",
}
TRANSFER_EDITABLE_FIELDS = {
    "customer_name",
    "customer_email",
    "customer_phone",
    "passengers",
    "notes",
    *ARRIVAL_FIELDS,
    *DEPARTURE_FIELDS,
}


def _text(value):
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value):
    return _text(value) or None


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = _text(value)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def _parse_int(value):
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number


class _Errors(dict):
    def check(self, condition, field, message):
        if not condition and field not in self:
            self[field] = message
        return condition

    def raise_if_any(self):
        if self:
            raise ValidationError(self)


def _check_contact(errors, name, email):
    errors.check(bool(name), "customer_name", "Your name is required.")
    if errors.check(bool(email), "customer_email", "Your email is required."):
        errors.check(bool(EMAIL_RE.match(email)), "customer_email", "Invalid email address.")


def _check_future_date(errors, field, value, today, max_days_ahead, label):
    parsed = parse_date(value)
    if not errors.check(parsed is not None, field, f"{label} is required."):
        return None
    errors.check(parsed >= today, field, f"{label} cannot be in the past.")
    if max_days_ahead is not None:
        errors.check(
            parsed <= today + timedelta(days=max_days_ahead),
            field,
            f"{label} must be within {max_days_ahead} days.",
        )
    return parsed


def require_mapping(payload):
    """Submitted data must be a mapping; ``None`` counts as empty."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError({"payload": "Expected a JSON object."})
    return payload


def _normalize(payload, aliases=None):
    cleaned = {}
    for key, value in require_mapping(payload).items():
        key = (aliases or {}).get(key, key)
        if key in SERVER_OWNED_FIELDS:
            continue
        cleaned[key] = value
    return cleaned


@dataclass(frozen=True)
class TourBookingDraft:
    tour_id: str
    customer_name: str
    customer_email: str
    booking_date: date
    number_of_people: int
    customer_phone: str = None
    special_requests: str = None

    @classmethod
    def from_payload(cls, payload, today=None, max_days_ahead=365):
        data = _normalize(payload, TOUR_FIELD_ALIASES)
        today = today or date.today()
        errors = _Errors()

        name = _text(data.get("customer_name"))
        email = _text(data.get("customer_email")).lower()
        _check_contact(errors, name, email)

        tour_id = _text(data.get("tour_id"))
        errors.check(bool(tour_id), "tour_id", "Please select a tour.")

        booking_date = _check_future_date(
            errors, "booking_date", data.get("booking_date"), today, max_days_ahead, "Booking date"
        )

        people = _parse_int(data.get("number_of_people"))
        errors.check(
            people is not None and MIN_TOUR_PEOPLE <= people <= MAX_TOUR_PEOPLE,
            "number_of_people",
            f"Number of people must be between {MIN_TOUR_PEOPLE} and {MAX_TOUR_PEOPLE}.",
        )

        errors.raise_if_any()
        return cls(
            tour_id=tour_id,
            customer_name=name,
            customer_email=email,
            booking_date=booking_date,
            number_of_people=people,
            customer_phone=_optional_text(data.get("customer_phone")),
            special_requests=_optional_text(data.get("special_requests")),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class TransferBookingDraft:
    customer_name: str
    customer_email: str
    service_type: str
    passengers: int
    customer_phone: str = None
    flight_number: str = None
    arrival_date: date = None
    arrival_time: str = None
    dropoff_location: str = None
    departure_flight_number: str = None
    departure_date: date = None
    departure_time: str = None
    pickup_location: str = None
    notes: str = None

    @classmethod
    def from_payload(cls, payload, today=None, max_days_ahead=365):
        data = _normalize(payload)
        today = today or date.today()
        errors = _Errors()

        name = _text(data.get("customer_name"))
        email = _text(data.get("customer_email")).lower()
        _check_contact(errors, name, email)

        service_type = _text(data.get("service_type")).lower()
        errors.check(
            service_type in TRANSFER_PRICES,
            "service_type",
            "Service type must be one of: pickup, dropoff, both.",
        )

        passengers = _parse_int(data.get("passengers"))
        errors.check(
            passengers is not None and MIN_PASSENGERS <= passengers <= MAX_PASSENGERS,
            "passengers",
            f"Passengers must be between {MIN_PASSENGERS} and {MAX_PASSENGERS}.",
        )

        notes = _optional_text(data.get("notes"))
        errors.check(
            notes is None or len(notes) <= MAX_NOTES_LENGTH,
            "notes",
            f"Notes cannot exceed {MAX_NOTES_LENGTH} characters.",
        )

        fields = {}
        if service_type in ARRIVAL_SERVICES:
            fields.update(cls._leg(errors, data, ARRIVAL_FIELDS, "arrival", today, max_days_ahead))
        if service_type in DEPARTURE_SERVICES:
            fields.update(cls._leg(errors, data, DEPARTURE_FIELDS, "departure", today, max_days_ahead))

        # Fields of a leg the service does not use are kept only when valid.
        for field_name in ARRIVAL_FIELDS + DEPARTURE_FIELDS:
            if field_name in fields:
                continue
            if field_name.endswith("_date"):
                fields[field_name] = parse_date(data.get(field_name))
            else:
                fields[field_name] = _optional_text(data.get(field_name))

        errors.raise_if_any()
        return cls(
            customer_name=name,
            customer_email=email,
            customer_phone=_optional_text(data.get("customer_phone")),
            service_type=service_type,
            passengers=passengers,
            notes=notes,
            **fields,
        )

    @staticmethod
    def _leg(errors, data, field_names, leg, today, max_days_ahead):
        flight_field, date_field, time_field, location_field = field_names
        label = "Arrival" if leg == "arrival" else "Departure"
        values = {}

        values[flight_field] = _text(data.get(flight_field))
        errors.check(bool(values[flight_field]), flight_field, f"{label} flight number is required.")

        values[date_field] = _check_future_date(
            errors, date_field, data.get(date_field), today, max_days_ahead, f"{label} date"
        )

        values[time_field] = _text(data.get(time_field))
        if errors.check(bool(values[time_field]), time_field, f"{label} time is required."):
            errors.check(bool(TIME_RE.match(values[time_field])), time_field, f"{label} time must be HH:MM.")

        values[location_field] = _text(data.get(location_field))
        location_label = "Drop-off" if leg == "arrival" else "Pickup"
        errors.check(bool(values[location_field]), location_field, f"{location_label} location is required.")
        return values

    @property
    def needs_arrival(self):
        return self.service_type in ARRIVAL_SERVICES

    @property
    def needs_departure(self):
        return self.service_type in DEPARTURE_SERVICES

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ContactMessage:
    name: str
    email: str
    subject: str
    message: str

    @classmethod
    def from_payload(cls, payload):
        data = require_mapping(payload)
        errors = _Errors()

        name = _text(data.get("name"))
        errors.check(
            len(name) >= MIN_CONTACT_NAME_LENGTH,
            "name",
            f"Name must be at least {MIN_CONTACT_NAME_LENGTH} characters.",
        )
        email = _text(data.get("email")).lower()
        errors.check(bool(EMAIL_RE.match(email)), "email", "Please enter a valid email address.")
        subject = _text(data.get("subject"))
        errors.check(subject in CONTACT_SUBJECTS, "subject", "Please select a subject.")
        message = _text(data.get("message"))
        errors.check(
            len(message) >= MIN_CONTACT_MESSAGE_LENGTH,
            "message",
            f"Message must be at least {MIN_CONTACT_MESSAGE_LENGTH} characters.",
        )

        errors.raise_if_any()
        return cls(name=name, email=email, subject=subject, message=message)


@dataclass(frozen=True)
class NewsletterSignup:
    email: str

    @classmethod
    def from_payload(cls, payload):
        email = _text(require_mapping(payload).get("email")).lower()
        errors = _Errors()
        errors.check(bool(EMAIL_RE.match(email)), "email", "Please enter a valid email address.")
        errors.raise_if_any()
        return cls(email=email)


def clean_edit(kind, changes, service_type=None):
    """Validate a staff edit; returns only the editable, normalised fields.

    Status is not handled here: status changes go through the transition
    engine. Pricing inputs such as ``tour_id`` and ``service_type`` are not
    editable. For transfers, ``service_type`` names the legs whose fields
    may not be cleared.
    """
    required = set()
    if service_type in ARRIVAL_SERVICES:
        required.update(ARRIVAL_FIELDS)
    if service_type in DEPARTURE_SERVICES:
        required.update(DEPARTURE_FIELDS)

    allowed = TOUR_EDITABLE_FIELDS if kind == TOUR else TRANSFER_EDITABLE_FIELDS
    errors = _Errors()
    cleaned = {}
    for key, value in require_mapping(changes).items():
        if key in SERVER_OWNED_FIELDS:
            continue
        if key not in allowed:
            errors.check(False, key, "This field cannot be edited.")
            continue
        if key == "customer_name":
            value = _text(value)
            errors.check(bool(value), key, "Your name is required.")
        elif key == "customer_email":
            value = _text(value).lower()
            errors.check(bool(EMAIL_RE.match(value)), key, "Invalid email address.")
        elif key.endswith("_date"):
            parsed = parse_date(value)
            optional = kind != TOUR and key not in required and value in (None, "")
            errors.check(parsed is not None or optional, key, "Invalid date.")
            value = parsed
        elif key == "number_of_people":
            value = _parse_int(value)
            errors.check(
                value is not None and MIN_TOUR_PEOPLE <= value <= MAX_TOUR_PEOPLE,
                key,
                f"Number of people must be between {MIN_TOUR_PEOPLE} and {MAX_TOUR_PEOPLE}.",
            )
        elif key == "passengers":
            value = _parse_int(value)
            errors.check(
                value is not None and MIN_PASSENGERS <= value <= MAX_PASSENGERS,
                key,
                f"Passengers must be between {MIN_PASSENGERS} and {MAX_PASSENGERS}.",
            )
        elif key == "notes":
            value = _optional_text(value)
            errors.check(value is None or len(value) <= MAX_NOTES_LENGTH, key, "Notes are too long.")
        else:
            value = _optional_text(value)
            if key in required:
                errors.check(value is not None, key, "This field is required for the booked service.")
        cleaned[key] = value
    errors.raise_if_any()
    return cleaned
