# A cart lives only in the browser. The server sees it as untrusted line items
# and turns it into a ValidatedCart priced from the catalog; nothing is stored.
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from models.base import ApiModel, Money


class CartLineItem(ApiModel):
    product_id: str = Field(validation_alias=AliasChoices('productId', 'product_id', 'id'))
    # None means "missing or not an integer", reported per item by the validator
    quantity: int | None = None

    @field_validator('product_id', mode='before')
    @classmethod
    def coerce_product_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator('quantity', mode='before')
    @classmethod
    def coerce_quantity(cls, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return None


class ValidatedLineItem(ApiModel):
    product_id: str
    title: str
    price: Money
    quantity: int
    line_total: Money


class ValidatedCart(ApiModel):
    valid: bool = True
    items: list[ValidatedLineItem]
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money


class CartValidationRequest(ApiModel):
    items: list[CartLineItem] | None = None
