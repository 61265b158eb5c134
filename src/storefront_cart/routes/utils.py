from typing import Any, Dict, Optional

from flask import abort, jsonify, request
from datetime import datetime, timezone

from storefront_cart.models.identity import Identity
from storefront_cart.services.cart_service import CartOutcome

DEVICE_HEADER = "X-Device-Id"
USER_HEADER = "X-User-Name"


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def outcome_response(outcome: CartOutcome, data: Optional[Dict[str, Any]]):
    """Success envelope for an accepted change, error envelope otherwise."""
    if outcome.ok:
        return success_response(data, outcome.message)

    if outcome.stale:
        body = {
            "code": "STALE_IDENTITY",
            "message": "Cart identity changed before the change could be applied.",
            "details": {},
        }
        status = 409
    else:
        body = {
            "code": outcome.error.error_code,
            "message": outcome.message,
            "details": outcome.error.details,
        }
        status = outcome.error.status_code

    return jsonify({
        "success": False,
        "error": body,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), status


def get_device_id() -> str:
    """Extract the device id that scopes cart storage from the X-Device-Id header."""
    device_id = (request.headers.get(DEVICE_HEADER) or "").strip()
    if not device_id:
        abort(400, "Missing X-Device-Id header.")
    if len(device_id) > 255:
        abort(400, "X-Device-Id header cannot exceed 255 characters.")
    return device_id


def get_request_identity() -> Identity:
    """Identity claimed by the request: X-User-Name plus the Authorization token."""
    name = (request.headers.get(USER_HEADER) or "").strip()
    token = (request.headers.get("Authorization") or "").strip()
    if not name:
        return Identity.guest()
    return Identity(name=name, token=token or None)
