from typing import Any

from pydantic import BaseModel, Field

from enums.email_template import EmailTemplate


class EmailMessageDTO(BaseModel):
    """One outbound email waiting in the dispatch queue."""
    to: str
    subject: str
    template: EmailTemplate
    context: dict[str, Any] = Field(default_factory=dict)
