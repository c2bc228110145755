from app.domain.entities import (
    ContactMessage,
    NewsletterSignup,
    TourBookingDraft,
    TransferBookingDraft,
    clean_edit,
    require_mapping,
)
from app.domain.merge_view import BookingFilters, DisplayBooking, MergedView, merge_and_filter
from app.domain.pricing import format_amount, price_for_tour, price_for_transfer
from app.domain.refs import AIRPORT, TOUR, BookingRef
from app.domain.transitions import CANCELLED, CONFIRMED, PENDING, TransitionEngine

__all__ = [
    "AIRPORT",
    "TOUR",
    "BookingRef",
    "BookingFilters",
    "DisplayBooking",
    "MergedView",
    "merge_and_filter",
    "ContactMessage",
    "NewsletterSignup",
    "TourBookingDraft",
    "TransferBookingDraft",
    "clean_edit",
    "require_mapping",
    "format_amount",
    "price_for_tour",
    "price_for_transfer",
    "PENDING",
    "CONFIRMED",
    "CANCELLED",
    "TransitionEngine",
]
