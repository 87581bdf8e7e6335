from __future__ import annotations

from typing import Any, Dict

from flask import jsonify, request

from ..core.exceptions import ValidationError


def json_body() -> Dict[str, Any]:
    """Request payload as a dict: JSON when sent, otherwise form fields."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("JSON body must be an object")
        return data
    return request.form.to_dict()


def json_response(payload: Any, status: int = 200):
    return jsonify(payload), status
