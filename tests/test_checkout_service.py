from storefront_cart.core.exceptions import PaymentError, UnauthorizedError, ValidationError
from storefront_cart.models.identity import Identity
from storefront_cart.services.checkout_service import CheckoutService


class TestClientToken:
    def test_returns_token(self, store, catalog):
        assert CheckoutService(store, catalog).get_client_token() == "client-token-123"

    def test_gateway_failure_notifies(self, store, catalog, messages):
        catalog.token_error = PaymentError("Braintree API unavailable", "token")

        assert CheckoutService(store, catalog).get_client_token() is None
        assert messages == [("error", "Failed to initialize payment gateway")]


class TestCheckout:
    def test_successful_payment_clears_cart(self, store, auth, catalog, messages):
        """
        Authenticated user pays for a two-line cart

        Validates:
        - The gateway receives the nonce, the persisted cart shape and the token
        - The cart is cleared only after the gateway accepts
        """
        auth.login("alice", "jwt-alice")
        store.add("iphone-14")
        store.add("airpods-pro")

        outcome = CheckoutService(store, catalog).checkout("fake-payment-nonce-123")

        assert outcome.ok
        assert outcome.message == "Payment Completed Successfully"
        assert store.get() == {}
        assert catalog.payments == [{
            "nonce": "fake-payment-nonce-123",
            "cart": {
                "iphone-14": {"quantity": 1, "price": 999, "productId": "prod-iphone-123"},
                "airpods-pro": {"quantity": 1, "price": 199, "productId": "prod-airpods-456"},
            },
            "token": "jwt-alice",
        }]
        assert messages[-2:] == [
            ("success", "Cart Cleared Successfully"),
            ("success", "Payment Completed Successfully"),
        ]

    def test_checkout_for_an_identity_no_longer_active(self, store, auth, catalog):
        auth.login("alice", "jwt-alice")
        store.add("iphone-14")
        auth.login("bob", "jwt-bob")

        alice = Identity("alice", "jwt-alice")

        outcome = CheckoutService(store, catalog).checkout("nonce", expected_identity=alice)

        assert outcome.stale
        assert catalog.payments == []

    def test_switch_during_payment_clears_the_paid_record(self, store, auth, catalog, storage):
        alice = Identity("alice", "jwt-alice")
        auth.set_identity(alice)
        store.add("iphone-14")
        storage.set_item("cart-bob", '{"airpods-pro": {"quantity": 1, "price": 199, "productId": "prod-airpods-456"}}')
        pay = catalog.submit_payment

        def pay_then_switch(nonce, cart, token):
            pay(nonce, cart, token)
            auth.login("bob", "jwt-bob")

        catalog.submit_payment = pay_then_switch

        outcome = CheckoutService(store, catalog).checkout("nonce", expected_identity=alice)

        assert outcome.ok
        assert outcome.identity == alice
        assert storage.get_item("cart-alice") == "{}"
        assert list(store.get()) == ["airpods-pro"]

    def test_guest_cannot_pay(self, store, catalog, messages):
        store.add("iphone-14")

        outcome = CheckoutService(store, catalog).checkout("nonce")

        assert isinstance(outcome.error, UnauthorizedError)
        assert catalog.payments == []
        assert "iphone-14" in store.get()
        assert messages[-1] == ("error", "Please login to checkout")

    def test_user_without_token_cannot_pay(self, store, auth, catalog):
        auth.login("alice")
        store.add("iphone-14")

        outcome = CheckoutService(store, catalog).checkout("nonce")

        assert isinstance(outcome.error, UnauthorizedError)

    def test_empty_cart_cannot_pay(self, store, auth, catalog):
        auth.login("alice", "jwt-alice")

        outcome = CheckoutService(store, catalog).checkout("nonce")

        assert isinstance(outcome.error, ValidationError)
        assert catalog.payments == []

    def test_failed_payment_keeps_cart(self, store, auth, catalog, storage, messages):
        auth.login("alice", "jwt-alice")
        store.add("iphone-14")
        catalog.payment_error = PaymentError("Network timeout", "payment")

        outcome = CheckoutService(store, catalog).checkout("nonce")

        assert isinstance(outcome.error, PaymentError)
        assert "iphone-14" in store.get()
        assert '"iphone-14"' in storage.get_item("cart-alice")
        assert messages[-1] == ("error", "Payment failed. Please try again.")
