from flask import Blueprint, jsonify

from app.routes.api.payload import json_object
from app.services import AssignmentService, DriverService

admin_driver_bp = Blueprint("admin_driver", __name__)


@admin_driver_bp.get("")
def list_drivers():
    return jsonify({"success": True, "drivers": [d.to_dict() for d in DriverService.list_drivers()]})


@admin_driver_bp.post("")
def create_driver():
    driver = DriverService.create_driver(json_object())
    return jsonify({"success": True, "driver": driver.to_dict()}), 201


@admin_driver_bp.get("/<int:driver_id>")
def get_driver(driver_id):
    return jsonify({"success": True, "driver": DriverService.get_driver(driver_id).to_dict()})


@admin_driver_bp.patch("/<int:driver_id>")
def update_driver(driver_id):
    driver = DriverService.update_driver(driver_id, json_object())
    return jsonify({"success": True, "driver": driver.to_dict()})


@admin_driver_bp.delete("/<int:driver_id>")
def delete_driver(driver_id):
    DriverService.delete_driver(driver_id)
    return jsonify({"success": True})


@admin_driver_bp.get("/<int:driver_id>/jobs")
def driver_jobs(driver_id):
    return jsonify({"success": True, "jobs": AssignmentService.jobs_for_driver(driver_id)})
