from pydantic import AliasChoices, Field, field_validator

from models.base import ApiModel, Money
from models.cart import CartLineItem


class ShippingAddressDTO(ApiModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class ShippingInfo(ApiModel):
    full_name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    address: str = Field(min_length=1, max_length=500)
    city: str = Field(min_length=1, max_length=200)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = Field(default='US', max_length=100)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        local, _, domain = value.partition('@')
        if not local or '.' not in domain:
            raise ValueError('Invalid email address')
        return value


class BillingInfo(ApiModel):
    """Accepted for the client's convenience; billing is collected by the provider."""
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    same_as_shipping: bool | None = None


class PaymentIntentRequest(ApiModel):
    items: list[CartLineItem] | None = None
    shipping_info: ShippingInfo
    billing_info: BillingInfo | None = None


class PaymentIntentResponse(ApiModel):
    client_secret: str
    payment_intent_id: str
    validated_total: Money


class CreateOrderRequest(ApiModel):
    payment_intent_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices('paymentIntentId', 'payment_intent_id'),
    )


class ReceiptItem(ApiModel):
    title: str
    quantity: int
    price: Money


class OrderReceipt(ApiModel):
    order_number: str
    email: str
    total: Money
    items: list[ReceiptItem]
    shipping_address: ShippingAddressDTO


class CreateOrderResponse(ApiModel):
    order: OrderReceipt
