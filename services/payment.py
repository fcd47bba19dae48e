import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from exceptions.cart import CartTooLargeException
from models.cart import ValidatedCart
from models.checkout import PaymentIntentRequest, PaymentIntentResponse, ShippingInfo
from payment_api.PaymentApiWrapper import PaymentApiWrapper
from services.cart import CartService
from utils.money import to_minor_units

logger = logging.getLogger(__name__)


class PaymentService:
    # Stripe limits each metadata value to 500 characters and an object to 50 keys
    METADATA_VALUE_LIMIT = 500
    METADATA_KEY_LIMIT = 50

    @staticmethod
    def chunk_metadata_value(key: str, value: str) -> dict[str, str]:
        """
        Split a long value over numbered keys.

        Short values are stored as-is under key. Long ones become
        key_0 .. key_n plus key_chunks with the chunk count.
        """
        limit = PaymentService.METADATA_VALUE_LIMIT
        if len(value) <= limit:
            return {key: value}
        chunks = [value[i:i + limit] for i in range(0, len(value), limit)]
        result = {f"{key}_{index}": chunk for index, chunk in enumerate(chunks)}
        result[f"{key}_chunks"] = str(len(chunks))
        return result

    @staticmethod
    def read_metadata_value(metadata: dict[str, str], key: str) -> str | None:
        """Inverse of chunk_metadata_value."""
        if key in metadata:
            return metadata[key]
        chunk_count = metadata.get(f"{key}_chunks")
        if chunk_count is None:
            return None
        parts = []
        for index in range(int(chunk_count)):
            part = metadata.get(f"{key}_{index}")
            if part is None:
                raise ValueError(f"metadata chunk {key}_{index} missing")
            parts.append(part)
        return "".join(parts)

    @staticmethod
    def build_metadata(cart: ValidatedCart, shipping_info: ShippingInfo) -> dict[str, str]:
        """
        Order snapshot stored on the payment intent.

        Order creation reads it back, so the order reflects exactly what was
        charged even if the catalog changes in between.
        """
        shipping_address = json.dumps({
            "address": shipping_info.address,
            "city": shipping_info.city,
            "state": shipping_info.state,
            "zipCode": shipping_info.zip_code,
            "country": shipping_info.country,
        }, separators=(",", ":"))
        items = json.dumps([
            {
                "id": line.product_id,
                "title": line.title,
                "price": float(line.price),
                "quantity": line.quantity,
            }
            for line in cart.items
        ], separators=(",", ":"))

        metadata = {
            "subtotal": str(cart.subtotal),
            "tax": str(cart.tax),
            "shipping": str(cart.shipping),
            "total": str(cart.total),
            "itemCount": str(len(cart.items)),
            "shippingName": shipping_info.full_name,
            "shippingEmail": shipping_info.email,
            "shippingPhone": shipping_info.phone or "",
        }
        metadata.update(PaymentService.chunk_metadata_value("shippingAddress", shipping_address))
        metadata.update(PaymentService.chunk_metadata_value("items", items))

        if len(metadata) > PaymentService.METADATA_KEY_LIMIT:
            logger.warning(f"Order snapshot for {len(cart.items)} line(s) needs {len(metadata)} metadata keys, "
                           f"limit is {PaymentService.METADATA_KEY_LIMIT}")
            raise CartTooLargeException(len(cart.items))
        return metadata

    @staticmethod
    def build_shipping(shipping_info: ShippingInfo) -> dict:
        address = {
            "line1": shipping_info.address,
            "city": shipping_info.city,
            "postal_code": shipping_info.zip_code,
        }
        if shipping_info.state:
            address["state"] = shipping_info.state
        if shipping_info.country and len(shipping_info.country) == 2:
            address["country"] = shipping_info.country.upper()
        shipping = {"name": shipping_info.full_name, "address": address}
        if shipping_info.phone:
            shipping["phone"] = shipping_info.phone
        return shipping

    @staticmethod
    async def create_payment_intent(request: PaymentIntentRequest, session: AsyncSession) -> PaymentIntentResponse:
        """
        Validate the cart again and open a payment intent for its total.

        Any total the client computed is ignored. Cart errors propagate
        unchanged (400); provider errors surface as PaymentProviderException.
        """
        cart = await CartService.validate_cart(request.items, session)
        amount = to_minor_units(cart.total)

        intent = await PaymentApiWrapper.create_payment_intent(
            amount=amount,
            currency=config.CURRENCY,
            metadata=PaymentService.build_metadata(cart, request.shipping_info),
            description=f"{config.PAYMENT_DESCRIPTION_PREFIX} - {len(cart.items)} item(s)",
            receipt_email=request.shipping_info.email,
            shipping=PaymentService.build_shipping(request.shipping_info),
        )

        logger.info(f"Payment intent {intent.id} opened for {len(cart.items)} line(s), amount={amount}")
        return PaymentIntentResponse(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            validated_total=cart.total,
        )
