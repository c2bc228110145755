from flask import Blueprint, jsonify

from app.extensions import cache
from app.services import StatsService

admin_stats_bp = Blueprint("admin_stats", __name__)


@admin_stats_bp.get("")
@cache.cached(timeout=60, key_prefix="admin_stats")
def stats():
    return jsonify({"success": True, **StatsService.summary()})
