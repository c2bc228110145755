from flask import current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

STAFF_PREFIX = "/api/admin/"
GENERIC_STAFF_MESSAGE = "Action failed."


class AppError(Exception):
    status_code = 400
    code = "APP_ERROR"

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(AppError):
    """Field-level failure; ``errors`` maps each offending field to a message."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors, message="Please check your information and try again."):
        super().__init__(message, 400)
        self.errors = dict(errors)

    def to_dict(self):
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class InvalidTransition(AppError):
    status_code = 409
    code = "INVALID_TRANSITION"

    def __init__(self, current, target):
        super().__init__(f"Invalid status transition from {current} to {target}.")
        self.current = current
        self.target = target


class AlreadyAssigned(AppError):
    status_code = 409
    code = "ALREADY_ASSIGNED"

    def __init__(self, booking_ref):
        super().__init__(f"Booking {booking_ref} already has an active driver assignment.")
        self.booking_ref = booking_ref


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    resource = "Resource"

    def __init__(self, identifier=None):
        message = f"{self.resource} not found."
        if identifier is not None:
            message = f"{self.resource} {identifier} not found."
        super().__init__(message)
        self.identifier = identifier


class BookingNotFound(NotFound):
    resource = "Booking"


class DriverNotFound(NotFound):
    resource = "Driver"


class TourNotFound(NotFound):
    resource = "Tour"


class AssignmentNotFound(NotFound):
    resource = "Assignment"


class InvalidQuantity(AppError):
    code = "INVALID_QUANTITY"

    def __init__(self, quantity):
        super().__init__(f"Invalid quantity: {quantity!r}.")
        self.quantity = quantity


class UnknownServiceType(AppError):
    code = "UNKNOWN_SERVICE_TYPE"

    def __init__(self, service_type):
        super().__init__(f"Unknown service type: {service_type!r}.")
        self.service_type = service_type


class PartialFailure(AppError):
    """Storage left a half-applied change behind; needs manual reconciliation."""

    status_code = 500
    code = "PARTIAL_FAILURE"


def _error_response(payload, status_code):
    return jsonify(payload), status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        payload = err.to_dict()
        if isinstance(err, PartialFailure):
            app.logger.critical("Partial failure on %s %s: %s", request.method, request.path, err.message)
            payload["error"] = GENERIC_STAFF_MESSAGE
        elif request.path.startswith(STAFF_PREFIX) and not isinstance(err, ValidationError):
            app.logger.warning("Staff action failed on %s %s: %s", request.method, request.path, err.message)
            payload["error"] = GENERIC_STAFF_MESSAGE
        return _error_response(payload, err.status_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(_err):
        app.logger.warning("Database integrity error")
        return _error_response({"success": False, "error": "Conflict. Resource already exists.", "code": "CONFLICT"}, 409)

    @app.errorhandler(400)
    def bad_request(_err):
        return _error_response({"success": False, "error": "Bad request", "code": "BAD_REQUEST"}, 400)

    @app.errorhandler(404)
    def not_found(_err):
        return _error_response({"success": False, "error": "Not found", "code": "NOT_FOUND"}, 404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return _error_response({"success": False, "error": "Method not allowed", "code": "METHOD_NOT_ALLOWED"}, 405)

    @app.errorhandler(429)
    def rate_limited(_err):
        current_app.logger.info("Rate limit exceeded for %s", request.remote_addr)
        return _error_response(
            {"success": False, "error": "Please wait a moment before trying again.", "code": "RATE_LIMITED"},
            429,
        )

    @app.errorhandler(500)
    def server_error(_err):
        app.logger.exception("Internal server error")
        return _error_response({"success": False, "error": "Internal server error", "code": "UNKNOWN_ERROR"}, 500)
