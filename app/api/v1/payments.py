import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from app.api.dependencies import get_checkout_service, get_email_service, get_webhook_dispatcher
from app.core.exceptions import ValidationException
from app.schemas.email import EmailSentResponse, WelcomeEmailRequest
from app.schemas.payment import (
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
    PackageListResponse,
    SessionStatusResponse,
    WebhookAck,
)
from app.services import catalog
from app.services.email import EmailService
from app.services.payment import CheckoutService
from app.services.webhook import WebhookDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments"])


@router.get("/packages", response_model=PackageListResponse)
async def get_packages():
    """Get available subscription packages"""
    return PackageListResponse(packages=catalog.list_packages())


@router.post("/create-checkout-session", response_model=CreateCheckoutSessionResponse)
async def create_checkout_session(
    payload: CreateCheckoutSessionRequest,
    origin: Optional[str] = Header(None),
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """Create a Stripe checkout session for a subscription package"""
    url = await checkout_service.create_session(payload.packageType, payload.origin or origin)
    return CreateCheckoutSessionResponse(url=url)


@router.get("/verify-session/{session_id}", response_model=SessionStatusResponse)
async def verify_session(
    session_id: str,
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    """Get payment status of a checkout session"""
    return await checkout_service.get_session_status(session_id)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
):
    """Handle Stripe webhooks; side effects run after the acknowledgment"""

    # Signature is computed over the raw body
    body = await request.body()
    await dispatcher.handle(body, stripe_signature)
    return WebhookAck(received=True)


@router.post("/send-welcome-email", response_model=EmailSentResponse)
async def send_welcome_email(
    payload: WelcomeEmailRequest,
    email_service: EmailService = Depends(get_email_service),
):
    """Send the welcome email to a newly registered user"""
    if not payload.email or not payload.name:
        raise ValidationException("Email and name are required")

    result = await email_service.send_welcome(payload.email, payload.name)
    return EmailSentResponse(success=True, message_id=result.get("messageId"))
