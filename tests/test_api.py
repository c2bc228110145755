"""
HTTP API: public submission endpoints and the staff back-office.
"""

import pytest

from app.models import DriverAssignment
from app.services import NotificationService


@pytest.fixture
def sent(monkeypatch):
    messages = []

    def fake_send(message):
        messages.append(message)
        return {"success": True, "message": "sent"}

    monkeypatch.setattr(NotificationService, "send_telegram", staticmethod(fake_send))
    return messages


def _create_tour_booking(client, payload):
    response = client.post("/api/v1/bookings/tour", json=payload)
    assert response.status_code == 201
    return response.get_json()["booking"]


@pytest.mark.integration
class TestPublicApi:
    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "ok"}

    def test_list_active_tours(self, client, tour):
        data = client.get("/api/v1/tours").get_json()
        assert [t["title"] for t in data["tours"]] == ["Blue Lagoon Sunset Cruise"]
        assert data["tours"][0]["price"] == 149.0

    def test_inactive_tour_is_hidden(self, client, tour):
        client.patch(f"/api/admin/tours/{tour.id}", json={"is_active": False})
        assert client.get(f"/api/v1/tours/{tour.id}").status_code == 404

    def test_create_tour_booking(self, client, tour_payload):
        booking = _create_tour_booking(client, tour_payload)
        assert booking["status"] == "pending"
        assert booking["total_amount"] == 298.0
        assert booking["ref"].startswith("tour:")

    def test_validation_errors_are_field_level(self, client, tour_payload):
        tour_payload.update(customer_email="not-an-email", number_of_people=50)
        response = client.post("/api/v1/bookings/tour", json=tour_payload)
        body = response.get_json()
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_FAILED"
        assert set(body["errors"]) == {"customer_email", "number_of_people"}

    def test_create_airport_booking(self, client, transfer_payload):
        response = client.post("/api/v1/bookings/airport", json=transfer_payload)
        body = response.get_json()
        assert response.status_code == 201
        assert body["bookingId"].startswith("airport:")
        assert body["booking"]["total_price"] == 75.0

    def test_unknown_route_is_json(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.get_json()["success"] is False


@pytest.mark.integration
class TestBookingFlow:
    def test_end_to_end(self, client, tour_payload, drivers):
        d1, d2 = drivers
        booking = _create_tour_booking(client, tour_payload)
        assert booking["total_amount"] == 298.0

        response = client.post("/api/admin/driver-assignments", json={"booking_ref": booking["ref"], "driver_id": d1.id})
        assert response.status_code == 201
        assert response.get_json()["booking"]["status"] == "confirmed"
        assert DriverAssignment.query.count() == 1

        response = client.post("/api/admin/driver-assignments", json={"booking_ref": booking["ref"], "driver_id": d2.id})
        body = response.get_json()
        assert response.status_code == 409
        assert body["code"] == "ALREADY_ASSIGNED"
        assert body["error"] == "Action failed."
        assert DriverAssignment.query.count() == 1

    def test_assign_requires_fields(self, client):
        response = client.post("/api/admin/driver-assignments", json={})
        assert response.status_code == 400
        assert set(response.get_json()["errors"]) == {"booking_ref", "driver_id"}

    def test_edit_to_confirmed_is_rejected(self, client, tour_payload):
        booking = _create_tour_booking(client, tour_payload)
        response = client.patch(f"/api/admin/bookings/{booking['ref']}", json={"status": "confirmed"})
        assert response.status_code == 409
        assert response.get_json()["code"] == "INVALID_TRANSITION"

    def test_cancel_and_delete(self, client, tour_payload):
        booking = _create_tour_booking(client, tour_payload)
        response = client.post(f"/api/admin/bookings/{booking['ref']}/cancel")
        assert response.get_json()["booking"]["status"] == "cancelled"
        response = client.delete(f"/api/admin/bookings/{booking['ref']}")
        assert response.get_json()["deleted"] == booking["ref"]
        assert client.get(f"/api/admin/bookings/{booking['ref']}").status_code == 404

    def test_dispatch_booking(self, client, tour_payload):
        response = client.post("/api/admin/bookings", json=tour_payload)
        assert response.status_code == 201
        assert response.get_json()["booking"]["created_by_staff"] is True


@pytest.mark.integration
class TestAdminApi:
    def test_merged_booking_list(self, client, tour_payload, transfer_payload):
        _create_tour_booking(client, tour_payload)
        client.post("/api/v1/bookings/airport", json=transfer_payload)
        body = client.get("/api/admin/bookings").get_json()
        assert body["total"] == 2

        body = client.get("/api/admin/bookings?search=ali&kind=all&status=pending").get_json()
        assert [row["customer_name"] for row in body["bookings"]] == ["Alice Brown"]

        body = client.get("/api/admin/bookings?type=airport").get_json()
        assert [row["kind"] for row in body["bookings"]] == ["airport"]

    def test_bad_kind_filter(self, client):
        response = client.get("/api/admin/bookings?kind=cruise")
        assert response.status_code == 400

    def test_staff_errors_are_generic(self, client):
        response = client.get("/api/admin/bookings/tour:missing")
        body = response.get_json()
        assert response.status_code == 404
        assert body["error"] == "Action failed."
        assert body["code"] == "NOT_FOUND"

    def test_tour_crud(self, client):
        response = client.post("/api/admin/tours", json={"title": "Dunn's River Falls", "price": "89.50"})
        assert response.status_code == 201
        tour = response.get_json()["tour"]
        assert tour["slug"] == "dunn-s-river-falls"

        response = client.patch(f"/api/admin/tours/{tour['id']}", json={"price": "95"})
        assert response.get_json()["tour"]["price"] == 95.0

        assert client.patch(f"/api/admin/tours/{tour['id']}", json={"price": "-1"}).status_code == 400
        assert client.delete(f"/api/admin/tours/{tour['id']}").status_code == 200
        assert client.get("/api/v1/tours").get_json()["tours"] == []

    def test_deleting_tour_keeps_bookings(self, client, tour, tour_payload):
        booking = _create_tour_booking(client, tour_payload)
        client.delete(f"/api/admin/tours/{tour.id}")
        body = client.get(f"/api/admin/bookings/{booking['ref']}").get_json()
        assert body["booking"]["tour_id"] is None

    def test_driver_crud_and_jobs(self, client, tour_payload):
        response = client.post("/api/admin/drivers", json={"name": "Winston", "phone": "555-0300", "vehicle": "Van"})
        assert response.status_code == 201
        driver = response.get_json()["driver"]
        assert driver["status"] == "available"

        response = client.patch(f"/api/admin/drivers/{driver['id']}", json={"status": "busy"})
        assert response.get_json()["driver"]["status"] == "busy"
        assert client.patch(f"/api/admin/drivers/{driver['id']}", json={"status": "asleep"}).status_code == 400

        booking = _create_tour_booking(client, tour_payload)
        client.post("/api/admin/driver-assignments", json={"booking_ref": booking["ref"], "driver_id": driver["id"]})
        jobs = client.get(f"/api/admin/drivers/{driver['id']}/jobs").get_json()["jobs"]
        assert [job["ref"] for job in jobs] == [booking["ref"]]

        assert client.delete(f"/api/admin/drivers/{driver['id']}").status_code == 200
        assert client.get(f"/api/admin/drivers/{driver['id']}").status_code == 404

    def test_missing_driver_fields(self, client):
        response = client.post("/api/admin/drivers", json={"name": "Winston"})
        assert response.status_code == 400
        assert set(response.get_json()["errors"]) == {"phone", "vehicle"}

    def test_assignment_status_update(self, client, tour_payload, drivers):
        booking = _create_tour_booking(client, tour_payload)
        created = client.post(
            "/api/admin/driver-assignments", json={"booking_ref": booking["ref"], "driver_id": drivers[0].id}
        ).get_json()["assignment"]
        response = client.patch(f"/api/admin/driver-assignments/{created['id']}", json={"assignment_status": "completed"})
        assert response.get_json()["assignment"]["assignment_status"] == "completed"
        listing = client.get("/api/admin/driver-assignments").get_json()["assignments"]
        assert listing[0]["customer_name"] == "Alice Brown"

    def test_stats(self, client, tour_payload, transfer_payload, drivers):
        booking = _create_tour_booking(client, tour_payload)
        client.post("/api/v1/bookings/airport", json=transfer_payload)
        client.post(f"/api/admin/bookings/{booking['ref']}/cancel")
        stats = client.get("/api/admin/stats").get_json()
        assert stats["totalBookings"] == 1
        assert stats["totalPickups"] == 1
        assert stats["totalDrivers"] == 2
        assert stats["totalRevenue"] == 75.0
        assert stats["bookingsByStatus"] == {"cancelled": 1}


@pytest.mark.integration
class TestRequestBodies:
    @pytest.mark.parametrize(
        "path", ["/api/v1/bookings/tour", "/api/v1/bookings/airport", "/api/admin/bookings", "/api/admin/tours"]
    )
    @pytest.mark.parametrize("body", [[{"tour_id": 1}], "text", 12])
    def test_non_object_body_is_rejected(self, client, path, body):
        response = client.post(path, json=body)
        assert response.status_code == 400
        assert response.get_json()["errors"] == {"payload": "Expected a JSON object."}

    def test_non_object_edit_is_rejected(self, client, tour_payload):
        booking = _create_tour_booking(client, tour_payload)
        response = client.patch(f"/api/admin/bookings/{booking['ref']}", json=["customer_name"])
        assert response.status_code == 400
        assert "payload" in response.get_json()["errors"]

    def test_non_ascii_digit_ref_is_not_found(self, client):
        assert client.get("/api/admin/bookings/tour:²").status_code == 404

    @pytest.mark.parametrize("notify, expected", [("false", 0), ("0", 0), (False, 0), ("true", 1), (None, 1)])
    def test_dispatch_notify_flag(self, client, tour_payload, sent, notify, expected):
        if notify is not None:
            tour_payload["notify"] = notify
        assert client.post("/api/admin/bookings", json=tour_payload).status_code == 201
        assert len(sent) == expected


@pytest.mark.integration
class TestInquiries:
    def test_contact_form(self, client, sent):
        response = client.post(
            "/api/v1/contact",
            json={
                "name": "Carla",
                "email": "carla@example.com",
                "subject": "Tour Inquiry",
                "message": "Is the sunset cruise running in May?",
            },
        )
        assert response.status_code == 200
        assert response.get_json()["success"] is True
        assert "Is the sunset cruise running in May?" in sent[0]

    def test_contact_form_errors(self, client, sent):
        response = client.post("/api/v1/contact", json={"name": "C", "email": "x", "subject": "", "message": ""})
        assert response.status_code == 400
        assert set(response.get_json()["errors"]) == {"name", "email", "subject", "message"}
        assert sent == []

    def test_newsletter(self, client, sent):
        response = client.post("/api/v1/newsletter", json={"email": "fan@example.com"})
        assert response.status_code == 200
        assert "fan@example.com" in sent[0]

    def test_newsletter_requires_email(self, client, sent):
        response = client.post("/api/v1/newsletter", json={"email": "nope"})
        assert response.status_code == 400
        assert response.get_json()["errors"] == {"email": "Please enter a valid email address."}

    def test_delivery_failure_still_thanks_the_visitor(self, client):
        # Testing config disables notifications.
        response = client.post("/api/v1/newsletter", json={"email": "fan@example.com"})
        assert response.status_code == 200
