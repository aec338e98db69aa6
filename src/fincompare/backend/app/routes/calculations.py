"""REST endpoints for income tax calculations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from fincompare.backend.app.services.calculation_service import calculate_tax

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


def _parse_calculation_payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")
    return dict(data)


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Calculate the tax summary for the submitted income and reliefs."""

    result = calculate_tax(_parse_calculation_payload())
    return jsonify(result), 200
