from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App settings
    APP_NAME: str = "healthxray-payments"
    ENVIRONMENT: str = "development"
    PORT: int = 3000

    # Stripe
    STRIPE_SECRET_KEY: str
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "usd"

    # Checkout redirects
    DEFAULT_ORIGIN: str = "https://healthxray.online"
    SUCCESS_PATH: str = "/success.html?session_id={CHECKOUT_SESSION_ID}"
    CANCEL_PATH: str = "/premium.html"

    # Brevo
    BREVO_API_KEY: str = ""
    EMAIL_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_SENDER_ADDRESS: str = "support@healthxray.online"
    EMAIL_SENDER_NAME: str = "HealthXRay"

    # Firebase
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIRESTORE_USERS_COLLECTION: str = "users"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:5500",
        "http://127.0.0.1:5500",
        "https://healthxray.online",
        "https://www.healthxray.online",
    ]

    # Keep-alive
    SELF_PING_URL: Optional[str] = None
    SELF_PING_INTERVAL_SECONDS: int = 14 * 60

    HTTP_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process; a missing Stripe key fails here."""
    return Settings()
