import logging
from typing import Any, Dict, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.exceptions import PaymentProviderException, SessionNotFoundException
from app.schemas.payment import Package, SessionStatusResponse
from app.services import catalog

logger = logging.getLogger(__name__)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Plain nested dict from a Stripe SDK object; StripeObject is not a dict."""
    if isinstance(obj, dict):
        return obj
    return obj.to_dict()


def customer_email_of(session: Dict[str, Any]) -> Optional[str]:
    """Email captured by checkout, falling back to the prefilled one."""
    details = session.get("customer_details") or {}
    return details.get("email") or session.get("customer_email")


class CheckoutService:
    """Creates Stripe-hosted subscription checkout sessions and reads their status."""

    def __init__(self, settings: Settings, client: Optional[stripe.StripeClient] = None):
        self.currency = settings.CURRENCY
        self.default_origin = settings.DEFAULT_ORIGIN.rstrip("/")
        self.success_path = settings.SUCCESS_PATH
        self.cancel_path = settings.CANCEL_PATH
        self.client = client or stripe.StripeClient(settings.STRIPE_SECRET_KEY)

    def build_session_params(self, package: Package, origin: Optional[str]) -> Dict[str, Any]:
        base = (origin or self.default_origin).rstrip("/")
        metadata = {"package": package.id}
        return {
            "payment_method_types": ["card"],
            "line_items": [{
                "price_data": {
                    "currency": self.currency,
                    "product_data": {"name": package.name},
                    "unit_amount": package.price,
                    "recurring": {"interval": "month"},
                },
                "quantity": 1,
            }],
            "mode": "subscription",
            "metadata": metadata,
            "subscription_data": {"metadata": dict(metadata)},
            "success_url": f"{base}{self.success_path}",
            "cancel_url": f"{base}{self.cancel_path}",
        }

    async def create_session(self, package_id: Optional[str], origin: Optional[str] = None) -> str:
        """Create a checkout session for a package and return its hosted URL."""

        package = catalog.get_package(package_id)
        params = self.build_session_params(package, origin)

        try:
            session = await run_in_threadpool(self.client.v1.checkout.sessions.create, params=params)
        except stripe.StripeError as e:
            logger.error("Stripe error creating checkout session for %s: %s", package.id, e.user_message or str(e))
            raise PaymentProviderException(e.user_message or str(e)) from e

        session = to_dict(session)
        logger.info("Created checkout session %s for package %s", session.get("id"), package.id)
        return session["url"]

    async def get_session_status(self, session_id: str) -> SessionStatusResponse:
        """Fetch payment status, customer email and total for a session."""

        try:
            session = await run_in_threadpool(self.client.v1.checkout.sessions.retrieve, session_id)
        except stripe.InvalidRequestError as e:
            if e.code == "resource_missing":
                logger.warning("Checkout session %s not found", session_id)
                raise SessionNotFoundException(session_id, e.user_message or str(e)) from e
            logger.error("Stripe rejected session lookup %s: %s", session_id, str(e))
            raise PaymentProviderException(e.user_message or str(e)) from e
        except stripe.StripeError as e:
            logger.error("Stripe error retrieving session %s: %s", session_id, str(e))
            raise PaymentProviderException(e.user_message or str(e)) from e

        session = to_dict(session)
        return SessionStatusResponse(
            status=session.get("payment_status"),
            customer_email=customer_email_of(session),
            amount_total=session.get("amount_total"),
        )
