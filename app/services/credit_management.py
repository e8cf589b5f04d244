import logging
from typing import Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.config import Settings

logger = logging.getLogger(__name__)


def create_firestore_client(settings: Settings) -> firestore.AsyncClient:
    """
    Create a Firestore client from a service account file, or from ambient
    application default credentials when no file is configured.
    """
    if settings.FIREBASE_CREDENTIALS_PATH:
        return firestore.AsyncClient.from_service_account_json(settings.FIREBASE_CREDENTIALS_PATH)
    return firestore.AsyncClient(project=settings.FIREBASE_PROJECT_ID)


class CreditService:
    """Credits user accounts stored in the Firestore users collection."""

    def __init__(self, db: firestore.AsyncClient, collection: str = "users"):
        self.db = db
        self.collection = collection

    async def find_user(self, email: str) -> Optional[firestore.AsyncDocumentReference]:
        """Return the first user document whose email matches, if any."""
        query = self.db.collection(self.collection).where(filter=FieldFilter("email", "==", email)).limit(1)
        snapshots = await query.get()
        if not snapshots:
            return None
        return snapshots[0].reference

    async def grant(self, email: str, credit_amount: int, package_name: str) -> bool:
        """
        Add credits to the user with this email and stamp the last purchase.

        The balance is incremented server-side so concurrent grants for the
        same user do not overwrite each other. Returns False when no user
        matches or the store fails; never raises.
        """
        if credit_amount < 0:
            logger.error("Refusing negative credit grant of %s for %s", credit_amount, email)
            return False

        try:
            user_ref = await self.find_user(email)
            if user_ref is None:
                logger.warning("No user found for %s; %s credits not granted", email, credit_amount)
                return False

            await user_ref.update({
                "credits": firestore.Increment(credit_amount),
                "lastPurchaseDate": firestore.SERVER_TIMESTAMP,
                "lastPackage": package_name,
            })
        except Exception:
            logger.exception("Failed to grant %s credits to %s", credit_amount, email)
            return False

        logger.info("Added %s credits to %s for %s", credit_amount, email, package_name)
        return True
