"""
Transactional email delivery through the Resend HTTP API.

Templates live next to this module (templates/<name>.html) and are rendered
with Jinja2 autoescaping. Sending raises EmailDeliveryException on any
failure; callers decide whether that matters.
"""

import asyncio
import logging
from pathlib import Path

import aiohttp
from jinja2 import Environment, FileSystemLoader, select_autoescape

import config
from enums.email_template import EmailTemplate
from exceptions.base import ConfigurationException
from exceptions.notification import EmailDeliveryException

logger = logging.getLogger(__name__)

templates_dir = Path(__file__).parent / "templates"
template_env = Environment(
    loader=FileSystemLoader(str(templates_dir)),
    autoescape=select_autoescape(["html"]),
)


class EmailApiWrapper:
    @staticmethod
    def is_configured() -> bool:
        return bool(config.RESEND_API_KEY)

    @staticmethod
    def render(template: EmailTemplate, context: dict) -> str:
        context = {"site_url": config.SITE_URL, **context}
        return template_env.get_template(f"{template.value}.html").render(**context)

    @staticmethod
    async def send(to: str, subject: str, html: str) -> str | None:
        """
        Send one email.

        Returns:
            Provider message id (if returned)

        Raises:
            ConfigurationException: If RESEND_API_KEY is not set
            EmailDeliveryException: On HTTP error, timeout or connection failure
        """
        if not EmailApiWrapper.is_configured():
            raise ConfigurationException("RESEND_API_KEY")

        payload = {
            "from": config.EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {config.RESEND_API_KEY}"}
        timeout = aiohttp.ClientTimeout(total=config.EMAIL_TIMEOUT_SECONDS)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(config.RESEND_API_URL, json=payload, headers=headers) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise EmailDeliveryException(to, body[:500], status_code=response.status)
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise EmailDeliveryException(to, f"{type(e).__name__}: {e}")

        message_id = data.get("id") if isinstance(data, dict) else None
        logger.info(f"Email '{subject}' accepted by provider (id={message_id})")
        return message_id
