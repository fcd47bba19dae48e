from pydantic import BaseModel, Field


class PaymentIntentDTO(BaseModel):
    """
    Provider-agnostic view of a payment intent.

    amount is in minor units (cents); metadata values are strings.
    """
    id: str
    status: str
    amount: int
    currency: str | None = None
    client_secret: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

