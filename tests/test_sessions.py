import logging

from storefront_cart.models.identity import Identity
from storefront_cart.repositories.storage import InMemoryStorage
from storefront_cart.services.auth_session import AuthSession
from storefront_cart.services.notifications import NotificationCenter
from storefront_cart.services.session_registry import CartSessionRegistry


class TestAuthSession:
    def test_starts_as_guest(self):
        assert AuthSession().identity == Identity.guest()

    def test_login_and_logout_notify(self):
        session = AuthSession()
        seen = []
        session.subscribe(seen.append)

        session.login("alice", "jwt")
        session.logout()

        assert seen == [Identity(name="alice", token="jwt"), Identity.guest()]

    def test_same_identity_is_not_a_change(self):
        session = AuthSession(Identity(name="alice", token="jwt"))
        seen = []
        session.subscribe(seen.append)

        session.set_identity(Identity(name="alice", token="jwt"))

        assert seen == []

    def test_unsubscribe(self):
        session = AuthSession()
        seen = []
        unsubscribe = session.subscribe(seen.append)

        unsubscribe()
        session.login("alice")

        assert seen == []


class TestNotificationCenter:
    def test_fan_out_and_logging(self, caplog):
        center = NotificationCenter()
        seen = []
        center.subscribe(seen.append)

        with caplog.at_level(logging.INFO):
            center.success("Add to Cart Successfully")
            center.error("Item does not exist")

        assert [(n.level, n.message) for n in seen] == [
            ("success", "Add to Cart Successfully"),
            ("error", "Item does not exist"),
        ]
        assert seen[1].is_error
        assert "Notify error: Item does not exist" in caplog.text

    def test_unsubscribe(self):
        center = NotificationCenter()
        seen = []
        center.subscribe(seen.append)()

        center.success("Cart Cleared Successfully")

        assert seen == []


class TestCartSessionRegistry:
    def make_registry(self, catalog, limit=10):
        storages = {}

        def storage_factory(device_id):
            return storages.setdefault(device_id, InMemoryStorage())

        return CartSessionRegistry(storage_factory, catalog, limit=limit), storages

    def test_same_device_same_session(self, catalog):
        registry, _ = self.make_registry(catalog)

        assert registry.session_for("device-1") is registry.session_for("device-1")

    def test_devices_have_separate_storage(self, catalog):
        registry, storages = self.make_registry(catalog)

        registry.session_for("device-1").store.add("iphone-14")

        assert registry.session_for("device-2").store.get() == {}
        assert storages["device-1"].get_item("cart-guest") is not None
        assert storages["device-2"].get_item("cart-guest") is None

    def test_oldest_session_is_evicted_and_reloads_from_storage(self, catalog):
        registry, _ = self.make_registry(catalog, limit=2)
        first = registry.session_for("device-1")
        first.store.add("iphone-14")

        registry.session_for("device-2")
        registry.session_for("device-3")

        assert len(registry) == 2
        reopened = registry.session_for("device-1")
        assert reopened is not first
        assert "iphone-14" in reopened.store.get()

    def test_session_wires_checkout_to_its_store(self, catalog):
        registry, _ = self.make_registry(catalog)

        session = registry.session_for("device-1")

        assert session.checkout.store is session.store
        assert session.store.auth is session.auth
