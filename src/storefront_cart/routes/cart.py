import logging
from typing import Optional, Tuple

from flask import Blueprint, abort, current_app, request
from marshmallow import ValidationError

from storefront_cart.models.cart import CartSummary, cart_to_dict
from storefront_cart.models.identity import Identity, storage_key
from storefront_cart.routes.schemas import AddCartItemSchema, CheckoutSchema, UpdateCartItemSchema
from storefront_cart.routes.utils import (
    get_device_id, get_request_identity, outcome_response, success_response
)
from storefront_cart.services.cart_service import CartOutcome
from storefront_cart.services.session_registry import CartSession, CartSessionRegistry

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()
_checkout_schema = CheckoutSchema()


def _current_session() -> Tuple[CartSession, Identity]:
    """
    Session of the calling device, switched to the identity the request carries

    The identity is returned too: store calls made for this request pass it
    back so a switch made by another request in between is detected.
    """
    registry = current_app.extensions["storefront_cart"].get(CartSessionRegistry)
    session = registry.session_for(get_device_id())
    identity = get_request_identity()
    session.auth.set_identity(identity)
    return session, identity


def _load_json(schema):
    if not request.is_json:
        abort(400, "Content-Type must be application/json.")
    try:
        return schema.load(request.get_json(force=True))
    except ValidationError as err:
        abort(400, str(err.messages))


def _cart_payload(outcome: CartOutcome) -> Optional[dict]:
    """Response body built from the cart the outcome carries, never the live store"""
    if outcome.stale:
        logger.info("Request identity is no longer active on this device")
        return None
    identity = outcome.identity
    return {
        "identity": identity.display_name,
        "storage_key": storage_key(identity),
        "items": cart_to_dict(outcome.cart),
        "summary": CartSummary.from_cart(outcome.cart, identity.is_authenticated).to_dict(),
    }


def _respond(outcome: CartOutcome):
    return outcome_response(outcome, _cart_payload(outcome))


@cart_bp.route("", methods=["GET"])
def get_cart():
    """Return the active identity's cart with totals."""
    session, identity = _current_session()
    return _respond(session.store.view(identity))


@cart_bp.route("/items", methods=["POST"])
def add_cart_item():
    """Add one unit of a product by slug."""
    data = _load_json(_add_schema)
    session, identity = _current_session()
    return _respond(session.store.add(data["slug"], expected_identity=identity))


@cart_bp.route("/items/<path:slug>", methods=["PATCH"])
def update_cart_item(slug: str):
    """Set the quantity of a line. Setting quantity to 0 removes it."""
    data = _load_json(_update_schema)
    session, identity = _current_session()
    return _respond(session.store.update_quantity(slug, data["quantity"], expected_identity=identity))


@cart_bp.route("/items/<path:slug>", methods=["DELETE"])
def delete_cart_item(slug: str):
    """Remove a line; removing an absent slug still succeeds."""
    session, identity = _current_session()
    return _respond(session.store.remove(slug, expected_identity=identity))


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    session, identity = _current_session()
    return _respond(session.store.clear(expected_identity=identity))


@cart_bp.route("/checkout/token", methods=["GET"])
def get_checkout_token():
    """Payment gateway client token for the checkout form."""
    session, _ = _current_session()
    token = session.checkout.get_client_token()
    if token is None:
        abort(503, "Failed to initialize payment gateway")
    return success_response({"client_token": token})


@cart_bp.route("/checkout", methods=["POST"])
def checkout():
    """Pay for the cart and clear it once the gateway accepts."""
    data = _load_json(_checkout_schema)
    session, identity = _current_session()
    return _respond(session.checkout.checkout(data["nonce"], expected_identity=identity))
