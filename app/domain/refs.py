from dataclasses import dataclass

from app.errors import BookingNotFound

TOUR = "tour"
AIRPORT = "airport"
BOOKING_KINDS = (TOUR, AIRPORT)


@dataclass(frozen=True)
class BookingRef:
    """Opaque booking key.

    Wraps the canonical identifier of a booking: its UUID when the record has
    one, otherwise the legacy numeric id rendered as a string. Internal code
    compares and hashes ``BookingRef`` values, never raw ids, so a tour
    booking ``12`` and a transfer booking ``12`` can never collide.
    """

    kind: str
    value: str

    def __post_init__(self):
        if self.kind not in BOOKING_KINDS:
            raise ValueError(f"Unknown booking kind: {self.kind!r}")
        if not self.value:
            raise ValueError("Booking reference value is required.")

    @classmethod
    def for_record(cls, kind, uuid=None, legacy_id=None):
        if uuid:
            return cls(kind, str(uuid))
        if legacy_id is None:
            raise ValueError("Booking record has neither a UUID nor an id.")
        return cls(kind, str(legacy_id))

    @classmethod
    def parse(cls, raw):
        """Parse ``"<kind>:<value>"``; raises ``BookingNotFound`` on garbage."""
        kind, sep, value = (raw or "").partition(":")
        if not sep or kind not in BOOKING_KINDS or not value:
            raise BookingNotFound(raw)
        return cls(kind, value)

    @property
    def is_legacy(self):
        return self.value.isascii() and self.value.isdecimal()

    def __str__(self):
        return f"{self.kind}:{self.value}"
