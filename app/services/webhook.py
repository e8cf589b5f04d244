import logging
from asyncio import Task
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import stripe

from app.core.exceptions import SignatureInvalidException
from app.core.metrics import WEBHOOK_EVENTS, WEBHOOK_REJECTED
from app.services import catalog
from app.services.credit_management import CreditService
from app.services.email import EmailService
from app.services.payment import customer_email_of, to_dict
from app.tasks.side_effects import SideEffectRunner

logger = logging.getLogger(__name__)


def _object(event: Dict[str, Any]) -> Dict[str, Any]:
    return (event.get("data") or {}).get("object") or {}


class WebhookEventType(str, Enum):
    SESSION_COMPLETED = "checkout.session.completed"
    SUBSCRIPTION_CREATED = "customer.subscription.created"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    INVOICE_SUCCEEDED = "invoice.payment_succeeded"
    INVOICE_FAILED = "invoice.payment_failed"
    UNHANDLED = "unhandled"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "WebhookEventType":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNHANDLED


class WebhookDispatcher:
    """Verifies Stripe webhook deliveries and routes them by event type."""

    def __init__(
        self,
        webhook_secret: str,
        email_service: EmailService,
        credit_service: CreditService,
        runner: Optional[SideEffectRunner] = None,
    ):
        if not webhook_secret:
            logger.warning("Stripe webhook secret is not configured; every delivery will be rejected")
        self.webhook_secret = webhook_secret
        self.email_service = email_service
        self.credit_service = credit_service
        self.runner = runner or SideEffectRunner()
        self._handlers: Dict[WebhookEventType, Callable[[Dict[str, Any]], List[Task]]] = {
            WebhookEventType.SESSION_COMPLETED: self._on_session_completed,
            WebhookEventType.SUBSCRIPTION_CREATED: self._on_subscription_created,
            WebhookEventType.SUBSCRIPTION_DELETED: self._on_subscription_deleted,
            WebhookEventType.INVOICE_SUCCEEDED: self._on_invoice_succeeded,
            WebhookEventType.INVOICE_FAILED: self._on_invoice_failed,
        }

    def verify(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Check the Stripe-Signature header against the raw body and parse the event."""
        if not signature:
            WEBHOOK_REJECTED.inc()
            logger.warning("Webhook delivery without signature header")
            raise SignatureInvalidException("Missing webhook signature")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as e:
            WEBHOOK_REJECTED.inc()
            logger.warning("Webhook payload is not valid JSON: %s", e)
            raise SignatureInvalidException("Invalid payload") from e
        except stripe.SignatureVerificationError as e:
            WEBHOOK_REJECTED.inc()
            logger.warning("Invalid webhook signature: %s", e)
            raise SignatureInvalidException() from e

        return to_dict(event)

    async def dispatch(self, event: Dict[str, Any]) -> List[Task]:
        """
        Route a verified event to its handler.

        Returns the side-effect tasks the handler spawned; they are not awaited.
        """
        event_type = WebhookEventType.parse(event.get("type"))
        WEBHOOK_EVENTS.labels(event_type=event_type.value).inc()
        handler = self._handlers.get(event_type, self._on_unhandled)
        return handler(event)

    async def handle(self, payload: bytes, signature: Optional[str]) -> List[Task]:
        event = self.verify(payload, signature)
        logger.info("Verified webhook event %s (%s)", event.get("id"), event.get("type"))
        return await self.dispatch(event)

    def _on_session_completed(self, event: Dict[str, Any]) -> List[Task]:
        session = _object(event)
        email = customer_email_of(session)
        package_id = (session.get("metadata") or {}).get("package")

        if not email or not package_id:
            logger.warning(
                "Checkout session %s missing email or package (email=%s, package=%s)",
                session.get("id"), email, package_id,
            )
            return []

        package = catalog.lookup(package_id)
        if package is None:
            logger.error("Checkout session %s references unknown package %s", session.get("id"), package_id)
            return []

        logger.info("Payment completed for %s: %s", email, package.name)
        return [
            self.runner.spawn("purchase_email", self.email_service.send_purchase_confirmation(email, package)),
            self.runner.spawn("credit_grant", self.credit_service.grant(email, package.credits, package.name)),
        ]

    def _on_subscription_created(self, event: Dict[str, Any]) -> List[Task]:
        logger.info("Subscription created: %s", _object(event).get("id"))
        return []

    def _on_subscription_deleted(self, event: Dict[str, Any]) -> List[Task]:
        logger.info("Subscription cancelled: %s", _object(event).get("id"))
        return []

    def _on_invoice_succeeded(self, event: Dict[str, Any]) -> List[Task]:
        logger.info("Invoice paid: %s", _object(event).get("id"))
        return []

    def _on_invoice_failed(self, event: Dict[str, Any]) -> List[Task]:
        logger.warning("Invoice payment failed: %s", _object(event).get("id"))
        return []

    def _on_unhandled(self, event: Dict[str, Any]) -> List[Task]:
        logger.info("Unhandled event type: %s", event.get("type"))
        return []
