import logging
from dataclasses import dataclass, field

from app.core.config import Settings
from app.services.credit_management import CreditService, create_firestore_client
from app.services.email import EmailService
from app.services.payment import CheckoutService
from app.services.webhook import WebhookDispatcher
from app.tasks.side_effects import SideEffectRunner

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    checkout_service: CheckoutService
    email_service: EmailService
    credit_service: CreditService
    webhook_dispatcher: WebhookDispatcher
    side_effects: SideEffectRunner = field(default_factory=SideEffectRunner)


def build_services(settings: Settings) -> Services:
    """Wire every service from one Settings instance."""
    side_effects = SideEffectRunner()
    email_service = EmailService(settings)
    credit_service = CreditService(create_firestore_client(settings), settings.FIRESTORE_USERS_COLLECTION)
    dispatcher = WebhookDispatcher(
        settings.STRIPE_WEBHOOK_SECRET,
        email_service,
        credit_service,
        runner=side_effects,
    )
    logger.info("Services initialised for %s", settings.ENVIRONMENT)
    return Services(
        settings=settings,
        checkout_service=CheckoutService(settings),
        email_service=email_service,
        credit_service=credit_service,
        webhook_dispatcher=dispatcher,
        side_effects=side_effects,
    )
