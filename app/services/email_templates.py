"""HTML bodies for the transactional emails.

Each builder returns a ``(subject, html)`` tuple and performs no I/O.
"""
from html import escape
from typing import Optional, Tuple

BRAND = "HealthXRay"


def format_amount(cents: int) -> str:
    """Format an integer amount in cents as a two-decimal dollar string."""
    return f"{cents / 100:.2f}"


def _layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><body style=\"font-family:Arial,sans-serif;color:#1f2937;\">"
        "<div style=\"max-width:600px;margin:0 auto;padding:24px;\">"
        f"<h1 style=\"color:#2563eb;\">{title}</h1>"
        f"{body}"
        f"<p style=\"margin-top:32px;color:#6b7280;font-size:12px;\">&copy; {BRAND}</p>"
        "</div></body></html>"
    )


def welcome_email(name: str) -> Tuple[str, str]:
    subject = f"Welcome to {BRAND}!"
    body = (
        f"<p>Hi {escape(name)},</p>"
        f"<p>Thanks for joining {BRAND}. Your account is ready to use.</p>"
        "<p>Upgrade to a premium package any time to get monthly credits.</p>"
    )
    return subject, _layout(subject, body)


def purchase_confirmation_email(
    package_name: str, price_cents: int, credits: int, name: Optional[str] = None
) -> Tuple[str, str]:
    subject = f"Your {package_name} purchase is confirmed"
    greeting = f"Hi {escape(name)}," if name else "Hi there,"
    body = (
        f"<p>{greeting}</p>"
        f"<p>Thank you for subscribing to the <strong>{escape(package_name)}</strong>.</p>"
        "<table style=\"border-collapse:collapse;\">"
        f"<tr><td style=\"padding:4px 12px 4px 0;\">Amount</td><td>${format_amount(price_cents)} / month</td></tr>"
        f"<tr><td style=\"padding:4px 12px 4px 0;\">Credits added</td><td>{credits}</td></tr>"
        "</table>"
        "<p>Your credits are available in your account now.</p>"
    )
    return subject, _layout("Payment confirmed", body)
