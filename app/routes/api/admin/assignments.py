from flask import Blueprint, current_app, jsonify

from app.errors import ValidationError
from app.routes.api.payload import json_object
from app.services import AssignmentService

admin_assignment_bp = Blueprint("admin_assignment", __name__)


@admin_assignment_bp.get("")
def list_assignments():
    return jsonify({"success": True, "assignments": AssignmentService.list_assignments()})


@admin_assignment_bp.post("")
def assign_driver():
    payload = json_object()
    booking_ref = payload.get("booking_ref") or payload.get("booking_id")
    driver_id = payload.get("driver_id")
    errors = {}
    if not booking_ref:
        errors["booking_ref"] = "Missing booking reference."
    if not driver_id:
        errors["driver_id"] = "Missing driver."
    if errors:
        raise ValidationError(errors)

    booking, assignment = AssignmentService.assign(booking_ref, driver_id)
    current_app.logger.info("Assignment %s created for booking %s.", assignment.id, booking.ref)
    return jsonify({"success": True, "assignment": assignment.to_dict(), "booking": booking.to_dict()}), 201


@admin_assignment_bp.patch("/<int:assignment_id>")
def update_assignment(assignment_id):
    payload = json_object()
    assignment = AssignmentService.update_assignment_status(assignment_id, payload.get("assignment_status"))
    return jsonify({"success": True, "assignment": assignment.to_dict()})
