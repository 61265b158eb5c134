import json

import pytest

from storefront_cart.models.cart import CartLineItem
from storefront_cart.schemas.cart_schemas import parse_stored_cart, serialize_cart


class TestParseStoredCart:
    """Raw storage content is never trusted"""

    def test_valid_record(self):
        raw = json.dumps({"iphone-14": {"quantity": 2, "price": 999, "productId": "prod-iphone-123"}})

        cart = parse_stored_cart(raw)

        assert cart == {"iphone-14": CartLineItem(quantity=2, price=999, product_id="prod-iphone-123")}

    @pytest.mark.parametrize("raw", [None, "", "{not json", "null", "[]", "42", '"cart"'])
    def test_unusable_content_is_empty_cart(self, raw):
        assert parse_stored_cart(raw) == {}

    def test_invalid_entries_are_dropped_individually(self):
        raw = json.dumps({
            "good": {"quantity": 1, "price": 10, "productId": "p1"},
            "zero": {"quantity": 0, "price": 10, "productId": "p2"},
            "negative-price": {"quantity": 1, "price": -5, "productId": "p3"},
            "no-product": {"quantity": 1, "price": 10},
            "not-an-object": "oops",
            "fractional": {"quantity": 1.5, "price": 10, "productId": "p4"},
            "infinite-price": {"quantity": 1, "price": float("inf"), "productId": "p5"},
        })

        cart = parse_stored_cart(raw)

        assert list(cart) == ["good"]

    def test_numeric_product_id_is_kept_as_text(self):
        raw = json.dumps({"mug": {"quantity": 1, "price": 5, "productId": 77}})

        assert parse_stored_cart(raw)["mug"].product_id == "77"

    def test_unknown_fields_are_ignored(self):
        raw = json.dumps({"mug": {"quantity": 1, "price": 5, "productId": "p", "name": "Mug"}})

        assert parse_stored_cart(raw)["mug"] == CartLineItem(quantity=1, price=5, product_id="p")


class TestSerializeCart:
    def test_empty_cart_is_empty_object(self):
        assert serialize_cart({}) == "{}"

    def test_uses_persisted_field_names(self):
        cart = {"iphone-14": CartLineItem(quantity=1, price=999, product_id="prod-iphone-123")}

        assert json.loads(serialize_cart(cart)) == {
            "iphone-14": {"quantity": 1, "price": 999, "productId": "prod-iphone-123"}
        }
