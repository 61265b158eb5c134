"""
Shared fixtures

The catalog is replaced by an in-process fake so cart behaviour can be
driven product by product; storage is a real InMemoryStorage or a SQLite
file under tmp_path.
"""
import pytest

from storefront_cart.app import create_app
from storefront_cart.core.config import Config
from storefront_cart.core.exceptions import ProductNotFoundError
from storefront_cart.repositories.cart_repository import CartRepository
from storefront_cart.repositories.storage import InMemoryStorage
from storefront_cart.services.auth_session import AuthSession
from storefront_cart.services.cart_service import CartStore
from storefront_cart.services.notifications import NotificationCenter
from storefront_cart.services.product_service import ProductSnapshot


IPHONE = ProductSnapshot(product_id="prod-iphone-123", price=999, quantity_available=10)
AIRPODS = ProductSnapshot(product_id="prod-airpods-456", price=199, quantity_available=3)
SOLD_OUT = ProductSnapshot(product_id="prod-soldout-789", price=49, quantity_available=0)
UNPRICED = ProductSnapshot(product_id="prod-unpriced-000", price=None, quantity_available=5)


class FakeCatalog:
    """Catalog stand-in: slug -> ProductSnapshot, or an exception to raise"""

    def __init__(self, products=None):
        self.products = dict(products or {})
        self.lookups = []
        self.on_lookup = None
        self.client_token = "client-token-123"
        self.token_error = None
        self.payments = []
        self.payment_error = None

    def lookup(self, slug):
        self.lookups.append(slug)
        if self.on_lookup is not None:
            self.on_lookup(slug)
        result = self.products.get(slug)
        if result is None:
            raise ProductNotFoundError(slug)
        if isinstance(result, Exception):
            raise result
        return result

    def get_client_token(self):
        if self.token_error is not None:
            raise self.token_error
        return self.client_token

    def submit_payment(self, nonce, cart, token):
        if self.payment_error is not None:
            raise self.payment_error
        self.payments.append({"nonce": nonce, "cart": cart, "token": token})


@pytest.fixture
def catalog():
    return FakeCatalog({
        "iphone-14": IPHONE,
        "airpods-pro": AIRPODS,
        "sold-out": SOLD_OUT,
        "unpriced": UNPRICED,
    })


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def repository(storage):
    return CartRepository(storage)


@pytest.fixture
def auth():
    return AuthSession()


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def messages(notifications):
    """Every notification published, in order, as (level, message)"""
    received = []
    notifications.subscribe(lambda n: received.append((n.level, n.message)))
    return received


@pytest.fixture
def store(repository, catalog, auth, notifications):
    cart_store = CartStore(repository, catalog, auth, notifications)
    yield cart_store
    cart_store.close()


@pytest.fixture
def app_config(tmp_path):
    return Config(environ={
        "DATABASE_URL": f"sqlite:///{tmp_path / 'cart.db'}",
        "CATALOG_BASE_URL": "http://catalog.test",
        "LOG_LEVEL": "WARNING",
    })


@pytest.fixture
def app(app_config, catalog):
    flask_app = create_app(app_config, catalog=catalog)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
