from fastapi import Request

from app.service_container import Services
from app.services.email import EmailService
from app.services.payment import CheckoutService
from app.services.webhook import WebhookDispatcher


def get_services(request: Request) -> Services:
    """Services built once in the application lifespan"""
    return request.app.state.services


def get_checkout_service(request: Request) -> CheckoutService:
    return get_services(request).checkout_service


def get_email_service(request: Request) -> EmailService:
    return get_services(request).email_service


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    return get_services(request).webhook_dispatcher
