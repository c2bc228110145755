from datetime import date, timedelta
from decimal import Decimal

import pytest

from app import create_app
from app.extensions import db
from app.models import Driver, Tour


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def future_date(app):
    return date.today() + timedelta(days=14)


@pytest.fixture
def tour(app):
    tour = Tour(
        title="Blue Lagoon Sunset Cruise",
        slug="blue-lagoon-sunset-cruise",
        price=Decimal("149.00"),
        duration="4 hours",
        location="Negril",
    )
    db.session.add(tour)
    db.session.commit()
    return tour


@pytest.fixture
def drivers(app):
    d1 = Driver(name="Desmond", phone="+1 876 555 0101", vehicle="Toyota HiAce")
    d2 = Driver(name="Marcia", phone="+1 876 555 0102", vehicle="Nissan Caravan")
    db.session.add_all([d1, d2])
    db.session.commit()
    return d1, d2


@pytest.fixture
def tour_payload(tour, future_date):
    return {
        "tour_id": tour.id,
        "customer_name": "Alice Brown",
        "customer_email": "alice@example.com",
        "customer_phone": "+1 555 0100",
        "booking_date": future_date.isoformat(),
        "number_of_people": 2,
    }


@pytest.fixture
def transfer_payload(future_date):
    return {
        "customer_name": "Bob Green",
        "customer_email": "bob@example.com",
        "customer_phone": "+1 555 0200",
        "service_type": "pickup",
        "passengers": 3,
        "flight_number": "AA123",
        "arrival_date": future_date.isoformat(),
        "arrival_time": "14:30",
        "dropoff_location": "Sandals Negril",
    }
