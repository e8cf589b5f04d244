import json

import httpx
import pytest

from app.core.exceptions import EmailDeliveryException
from app.services import catalog, email_templates
from app.services.email import EmailService


def make_service(settings, handler):
    return EmailService(settings, transport=httpx.MockTransport(handler))


async def test_send_posts_brevo_payload_with_api_key(settings):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(201, json={"messageId": "<abc@smtp>"})

    service = make_service(settings, handler)
    result = await service.send("a@b.com", "Hello", "<p>Hi</p>", to_name="Ann")

    request = captured["request"]
    body = json.loads(request.content)
    assert str(request.url) == settings.EMAIL_API_URL
    assert request.headers["api-key"] == "brevo-test-key"
    assert body["to"] == [{"email": "a@b.com", "name": "Ann"}]
    assert body["sender"] == {"name": "HealthXRay", "email": "support@example.com"}
    assert body["subject"] == "Hello"
    assert body["htmlContent"] == "<p>Hi</p>"
    assert result == {"messageId": "<abc@smtp>"}


async def test_send_failure_returns_provider_text_verbatim(settings):
    service = make_service(settings, lambda request: httpx.Response(401, text='{"code":"unauthorized"}'))

    with pytest.raises(EmailDeliveryException) as exc_info:
        await service.send("a@b.com", "Hello", "<p>Hi</p>")

    assert exc_info.value.message == '{"code":"unauthorized"}'
    assert exc_info.value.provider_status == 401
    assert exc_info.value.status_code == 500


async def test_send_transport_error_raises_delivery_exception(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused")

    service = make_service(settings, handler)
    with pytest.raises(EmailDeliveryException):
        await service.send("a@b.com", "Hello", "<p>Hi</p>")


async def test_purchase_confirmation_mentions_package(settings):
    sent = {}

    def handler(request):
        sent.update(json.loads(request.content))
        return httpx.Response(201, json={})

    service = make_service(settings, handler)
    await service.send_purchase_confirmation("a@b.com", catalog.lookup("silver"))

    assert "Silver Package" in sent["subject"]
    assert "$19.99" in sent["htmlContent"]
    assert "100" in sent["htmlContent"]


def test_format_amount_uses_two_decimals():
    assert email_templates.format_amount(2999) == "29.99"
    assert email_templates.format_amount(5000) == "50.00"
    assert email_templates.format_amount(5) == "0.05"


def test_welcome_email_escapes_name():
    subject, html = email_templates.welcome_email("<Ann>")
    assert subject == "Welcome to HealthXRay!"
    assert "&lt;Ann&gt;" in html
    assert "<Ann>" not in html
