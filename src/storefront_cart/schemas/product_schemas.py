from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogProduct(BaseModel):
    """The slice of a catalog product the cart depends on"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", description="Catalog product id")
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False, description="Current unit price")
    quantity: int = Field(default=0, description="Units in stock")
    name: Optional[str] = None
    slug: Optional[str] = None

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ProductLookupResponse(BaseModel):
    """Body of ``GET /api/v1/product/get-product/<slug>``"""
    model_config = ConfigDict(extra="ignore")

    product: Optional[CatalogProduct] = None


class ClientTokenResponse(BaseModel):
    """Body of the payment gateway token endpoint"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_token: Optional[str] = Field(default=None, alias="clientToken")


class PaymentResponse(BaseModel):
    """Body of the payment endpoint"""
    model_config = ConfigDict(extra="ignore")

    ok: bool = False
