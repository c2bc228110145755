from decimal import Decimal, ROUND_HALF_UP

from app.errors import AppError, InvalidQuantity, UnknownServiceType

MIN_TOUR_PEOPLE = 1
MAX_TOUR_PEOPLE = 20

# Flat transfer fee per booking; passenger count does not change the price.
TRANSFER_PRICES = {
    "pickup": Decimal("75.00"),
    "dropoff": Decimal("75.00"),
    "both": Decimal("140.00"),
}


def _unit_price(tour):
    raw = tour.get("price") if isinstance(tour, dict) else getattr(tour, "price", None)
    if raw is None:
        raise AppError("Tour price is not set.", 400)
    return Decimal(str(raw))


def price_for_tour(tour, people):
    if isinstance(people, bool):
        raise InvalidQuantity(people)
    try:
        count = int(people)
    except (TypeError, ValueError) as exc:
        raise InvalidQuantity(people) from exc
    if count != people and str(count) != str(people).strip():
        raise InvalidQuantity(people)
    if count < MIN_TOUR_PEOPLE or count > MAX_TOUR_PEOPLE:
        raise InvalidQuantity(people)
    return _unit_price(tour) * count


def price_for_transfer(service_type):
    try:
        return TRANSFER_PRICES[service_type]
    except (KeyError, TypeError) as exc:
        raise UnknownServiceType(service_type) from exc


def format_amount(amount):
    """Render a stored amount as ``$1,234.50``; rounding happens only here."""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${value:,.2f}"
