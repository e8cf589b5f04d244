import logging
from typing import Dict, Optional

import httpx

from app.core.config import Settings
from app.core.exceptions import EmailDeliveryException
from app.schemas.payment import Package
from app.services import email_templates

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails through the Brevo API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.EMAIL_API_URL
        self.sender = {"name": settings.EMAIL_SENDER_NAME, "email": settings.EMAIL_SENDER_ADDRESS}
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        self.headers = {
            "api-key": settings.BREVO_API_KEY,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._transport = transport

    async def send(self, to_email: str, subject: str, html_body: str, to_name: Optional[str] = None) -> Dict:
        """Send one email. Raises EmailDeliveryException on any non-2xx answer."""

        recipient = {"email": to_email}
        if to_name:
            recipient["name"] = to_name

        payload = {
            "sender": self.sender,
            "to": [recipient],
            "subject": subject,
            "htmlContent": html_body,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers=self.headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error("HTTP error sending email to %s: %s", to_email, str(e))
            raise EmailDeliveryException(f"Email service unavailable: {e}") from e

        if not response.is_success:
            logger.error("Email provider rejected message to %s (%s): %s", to_email, response.status_code, response.text)
            raise EmailDeliveryException(response.text, provider_status=response.status_code)

        logger.info("Email '%s' sent to %s", subject, to_email)
        try:
            return response.json()
        except ValueError:
            return {}

    async def send_welcome(self, to_email: str, name: str) -> Dict:
        subject, html = email_templates.welcome_email(name)
        return await self.send(to_email, subject, html, to_name=name)

    async def send_purchase_confirmation(self, to_email: str, package: Package, name: Optional[str] = None) -> Dict:
        subject, html = email_templates.purchase_confirmation_email(
            package.name, package.price, package.credits, name=name
        )
        return await self.send(to_email, subject, html, to_name=name)
