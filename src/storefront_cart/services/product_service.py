from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError as SchemaValidationError

from storefront_cart.core.config import CatalogConfig
from storefront_cart.core.exceptions import (
    CatalogUnavailableError, PaymentError, ProductNotFoundError
)
from storefront_cart.schemas.product_schemas import (
    ClientTokenResponse, PaymentResponse, ProductLookupResponse
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductSnapshot:
    """Price and stock of a product as the catalog reports them right now"""
    product_id: str
    price: Optional[float]
    quantity_available: int


class ProductCatalogClient:
    """
    HTTP client for the product catalog service

    Responsibilities:
    - Look up current price and stock for a slug
    - Fetch a payment gateway client token
    - Submit a cart payment
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        product_path: str = "/api/v1/product/get-product",
        token_path: str = "/api/v1/product/braintree/token",
        payment_path: str = "/api/v1/product/braintree/payment",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.product_path = product_path
        self.token_path = token_path
        self.payment_path = payment_path
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, catalog: CatalogConfig) -> "ProductCatalogClient":
        return cls(
            base_url=catalog.base_url,
            timeout_seconds=catalog.timeout_seconds,
            product_path=catalog.product_path,
            token_path=catalog.token_path,
            payment_path=catalog.payment_path,
        )

    def product_url(self, slug: str) -> str:
        return f"{self.base_url}{self.product_path}/{quote(slug, safe='')}"

    def lookup(self, slug: str) -> ProductSnapshot:
        """
        Fetch current price and stock for a slug

        Raises:
            ProductNotFoundError: 404, or a body without a product
            CatalogUnavailableError: network failure, non-2xx, malformed body
        """
        url = self.product_url(slug)
        logger.info(f"Looking up product '{slug}'")

        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
        except requests.Timeout:
            logger.warning(f"Catalog lookup for '{slug}' timed out")
            raise CatalogUnavailableError("Network timeout")
        except requests.RequestException as e:
            logger.error(f"Catalog lookup for '{slug}' failed: {str(e)}")
            raise CatalogUnavailableError(f"Product catalog unavailable: {str(e)}")

        if response.status_code == 404:
            raise ProductNotFoundError(slug)

        if not response.ok:
            logger.error(f"Catalog lookup for '{slug}' returned {response.status_code}")
            raise CatalogUnavailableError(
                f"Product catalog returned status {response.status_code}"
            )

        try:
            body = ProductLookupResponse.model_validate(response.json())
        except (ValueError, SchemaValidationError) as e:
            logger.error(f"Malformed catalog response for '{slug}': {str(e)}")
            raise CatalogUnavailableError("Malformed product response")

        if body.product is None:
            raise ProductNotFoundError(slug)

        return ProductSnapshot(
            product_id=body.product.id,
            price=body.product.price,
            quantity_available=body.product.quantity,
        )

    def get_client_token(self) -> str:
        """Payment gateway client token used to initialize checkout"""
        url = f"{self.base_url}{self.token_path}"

        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
            body = ClientTokenResponse.model_validate(response.json())
        except requests.RequestException as e:
            logger.error(f"Client token request failed: {str(e)}")
            raise PaymentError(f"Client token request failed: {str(e)}", "token")
        except (ValueError, SchemaValidationError) as e:
            logger.error(f"Malformed client token response: {str(e)}")
            raise PaymentError("Malformed client token response", "token")

        if not body.client_token:
            raise PaymentError("Payment gateway returned no client token", "token")
        return body.client_token

    def submit_payment(self, nonce: str, cart: Dict[str, Any], token: str) -> None:
        """Charge the cart; the catalog creates the order on success"""
        url = f"{self.base_url}{self.payment_path}"

        try:
            response = self.session.post(
                url,
                json={"nonce": nonce, "cart": cart},
                headers={"Authorization": token},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            body = PaymentResponse.model_validate(response.json())
        except requests.RequestException as e:
            logger.error(f"Payment request failed: {str(e)}")
            raise PaymentError(f"Payment request failed: {str(e)}", "payment")
        except (ValueError, SchemaValidationError) as e:
            logger.error(f"Malformed payment response: {str(e)}")
            raise PaymentError("Malformed payment response", "payment")

        if not body.ok:
            raise PaymentError("Payment was not accepted", "payment")
