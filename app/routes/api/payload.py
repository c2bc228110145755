from flask import request

from app.domain import require_mapping


def json_object():
    """Return the request body as a dict; anything but a JSON object is a 400."""
    return require_mapping(request.get_json(silent=True))
