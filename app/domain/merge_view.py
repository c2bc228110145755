from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from app.domain.refs import AIRPORT, BOOKING_KINDS, TOUR, BookingRef
from app.errors import ValidationError

ALL = "all"
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class BookingFilters:
    search: str = ""
    kind: str = ALL
    status: str = ALL

    @classmethod
    def from_mapping(cls, raw):
        raw = raw or {}
        return cls(
            search=(raw.get("search") or "").strip(),
            kind=(raw.get("kind") or raw.get("type") or ALL).strip().lower(),
            status=(raw.get("status") or ALL).strip().lower(),
        )

    def matches(self, booking):
        if self.kind != ALL and booking.kind != self.kind:
            return False
        if self.status != ALL and (booking.status or "").lower() != self.status:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (booking.customer_name, booking.customer_email, booking.customer_phone)
            if not any(needle in (value or "").lower() for value in haystack):
                return False
        return True


@dataclass(frozen=True)
class DisplayBooking:
    kind: str
    ref: BookingRef
    customer_name: str
    customer_email: str
    customer_phone: str
    status: str
    created_at: object
    amount: object
    service_date: object
    source: dict = field(repr=False, compare=False)

    def to_dict(self):
        payload = dict(self.source)
        payload["kind"] = self.kind
        payload["ref"] = str(self.ref)
        return payload


def _as_mapping(record):
    if isinstance(record, dict):
        return record
    to_dict = getattr(record, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(vars(record))


def _created_key(value):
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return _EPOCH


def to_display(kind, record):
    data = _as_mapping(record)
    ref = BookingRef.for_record(kind, uuid=data.get("uuid"), legacy_id=data.get("id"))
    if kind == TOUR:
        amount = data.get("total_amount")
        service_date = data.get("booking_date")
    else:
        amount = data.get("total_price")
        service_date = data.get("arrival_date") or data.get("departure_date")
    return DisplayBooking(
        kind=kind,
        ref=ref,
        customer_name=data.get("customer_name") or "",
        customer_email=data.get("customer_email") or "",
        customer_phone=data.get("customer_phone"),
        status=data.get("status"),
        created_at=data.get("created_at"),
        amount=amount,
        service_date=service_date,
        source=data,
    )


class MergedView:
    """Restartable view over two booking collections.

    Each iteration re-reads the inputs, so iterating twice yields the same
    result and the source collections are never modified.
    """

    def __init__(self, tour_bookings, transfer_bookings, filters=None):
        self._sources = (
            (TOUR, _replayable(tour_bookings)),
            (AIRPORT, _replayable(transfer_bookings)),
        )
        if filters is None or isinstance(filters, dict):
            filters = BookingFilters.from_mapping(filters)
        if filters.kind not in BOOKING_KINDS + (ALL,):
            raise ValidationError({"kind": "Booking type must be one of: all, tour, airport."})
        self.filters = filters

    def _merged(self):
        seen = set()
        rows = []
        for kind, records in self._sources:
            for record in records:
                row = to_display(kind, record)
                if row.ref in seen:
                    continue
                seen.add(row.ref)
                rows.append(row)
        # sorted() is stable with reverse=True, so ties keep insertion order.
        return sorted(rows, key=lambda row: _created_key(row.created_at), reverse=True)

    def __iter__(self):
        return (row for row in self._merged() if self.filters.matches(row))

    def count(self):
        return sum(1 for _ in self)

    def to_list(self):
        return [row.to_dict() for row in self]


def _replayable(records):
    if records is None:
        return ()
    # One-shot iterators are captured once so the view can be re-iterated.
    if iter(records) is records:
        return tuple(records)
    return records


def merge_and_filter(tour_bookings, transfer_bookings, filters=None):
    return MergedView(tour_bookings, transfer_bookings, filters)
