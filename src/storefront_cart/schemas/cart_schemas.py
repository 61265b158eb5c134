import json
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaValidationError

from storefront_cart.models.cart import Cart, CartLineItem

logger = logging.getLogger(__name__)


class StoredLineItem(BaseModel):
    """One persisted cart entry as found in storage"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    quantity: int = Field(gt=0, description="Quantity in cart")
    price: float = Field(ge=0, allow_inf_nan=False, description="Price snapshot when added")
    product_id: str = Field(alias="productId", min_length=1, description="Catalog product id")

    @field_validator('product_id', mode='before')
    @classmethod
    def coerce_product_id(cls, v):
        # Catalog ids are opaque; numeric ids from older records are kept as text
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_line_item(self) -> CartLineItem:
        return CartLineItem(quantity=self.quantity, price=self.price, product_id=self.product_id)


def parse_stored_cart(raw: Optional[str]) -> Cart:
    """
    Turn raw storage content into a cart, never trusting it.

    Missing, unparsable or non-object content yields an empty cart.
    Entries that do not validate are dropped individually so one corrupt
    line does not cost the customer the whole cart.
    """
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Discarding unparsable cart record: {str(e)}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Discarding cart record of type {type(data).__name__}")
        return {}

    cart: Cart = {}
    for slug, entry in data.items():
        if not slug:
            continue
        try:
            cart[slug] = StoredLineItem.model_validate(entry).to_line_item()
        except SchemaValidationError as e:
            logger.warning(f"Dropping invalid cart entry '{slug}': {e.error_count()} error(s)")
    return cart


def serialize_cart(cart: Cart) -> str:
    """JSON text written to storage; always an object, possibly ``{}``"""
    return json.dumps({slug: item.to_dict() for slug, item in cart.items()})
