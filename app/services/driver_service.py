import re

from app.errors import DriverNotFound, ValidationError
from app.extensions import db
from app.models import Driver
from app.models.driver import DRIVER_STATUSES

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class DriverService:
    REQUIRED_FIELDS = ("name", "phone", "vehicle")
    EDITABLE_FIELDS = {"name", "phone", "email", "vehicle", "status"}

    @staticmethod
    def _clean(payload, partial=False):
        errors = {}
        cleaned = {}
        for key, value in (payload or {}).items():
            if key not in DriverService.EDITABLE_FIELDS:
                if partial:
                    errors[key] = "This field cannot be edited."
                continue
            cleaned[key] = (str(value).strip() if value is not None else "") or None

        if not partial:
            for key in DriverService.REQUIRED_FIELDS:
                if not cleaned.get(key):
                    errors[key] = f"Driver {key} is required."
            cleaned.setdefault("status", "available")
        else:
            for key in DriverService.REQUIRED_FIELDS:
                if key in cleaned and not cleaned[key]:
                    errors[key] = f"Driver {key} is required."

        status = cleaned.get("status")
        if "status" in cleaned:
            status = (status or "").lower()
            cleaned["status"] = status
            if status not in DRIVER_STATUSES:
                errors["status"] = "Status must be one of: available, busy, offline."
        email = cleaned.get("email")
        if email and not EMAIL_RE.match(email):
            errors["email"] = "Invalid email address."

        if errors:
            raise ValidationError(errors)
        return cleaned

    @staticmethod
    def list_drivers():
        return Driver.query.order_by(Driver.name.asc()).all()

    @staticmethod
    def get_driver(driver_id):
        try:
            key = int(driver_id)
        except (TypeError, ValueError) as exc:
            raise DriverNotFound(driver_id) from exc
        driver = db.session.get(Driver, key)
        if not driver:
            raise DriverNotFound(driver_id)
        return driver

    @staticmethod
    def create_driver(payload):
        driver = Driver(**DriverService._clean(payload))
        db.session.add(driver)
        db.session.commit()
        return driver

    @staticmethod
    def update_driver(driver_id, payload):
        driver = DriverService.get_driver(driver_id)
        for key, value in DriverService._clean(payload, partial=True).items():
            setattr(driver, key, value)
        db.session.commit()
        return driver

    @staticmethod
    def delete_driver(driver_id):
        driver = DriverService.get_driver(driver_id)
        # Assignment rows go with the driver; their bookings stay confirmed.
        db.session.delete(driver)
        db.session.commit()
