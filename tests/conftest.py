"""
Shared fixtures: test settings, signed webhook payloads and an in-memory
stand-in for the Firestore users collection.
"""
import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, List, Optional

# main.py reads settings at import time
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")

import pytest
from google.cloud import firestore

from app.core.config import Settings

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        BREVO_API_KEY="brevo-test-key",
        EMAIL_SENDER_ADDRESS="support@example.com",
        EMAIL_SENDER_NAME="HealthXRay",
        CORS_ORIGINS=["http://localhost:5500"],
    )


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header value for ``payload``."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }).encode()


class FakeDocumentReference:
    def __init__(self, doc_id: str, data: Dict[str, Any]):
        self.id = doc_id
        self.data = data
        self.updates: List[Dict[str, Any]] = []

    async def update(self, fields: Dict[str, Any]) -> None:
        self.updates.append(fields)
        for key, value in fields.items():
            if isinstance(value, firestore.Increment):
                self.data[key] = self.data.get(key, 0) + value.value
            elif value is firestore.SERVER_TIMESTAMP:
                self.data[key] = "server-timestamp"
            else:
                self.data[key] = value


class FakeSnapshot:
    def __init__(self, reference: FakeDocumentReference):
        self.reference = reference


class FakeQuery:
    def __init__(self, docs: List[FakeDocumentReference], field: str, value: Any):
        self.docs = docs
        self.field = field
        self.value = value
        self.max_results: Optional[int] = None

    def limit(self, count: int) -> "FakeQuery":
        self.max_results = count
        return self

    async def get(self) -> List[FakeSnapshot]:
        matches = [FakeSnapshot(d) for d in self.docs if d.data.get(self.field) == self.value]
        return matches[: self.max_results] if self.max_results else matches


class FakeCollection:
    def __init__(self, docs: List[FakeDocumentReference]):
        self.docs = docs

    def where(self, *, filter) -> FakeQuery:
        assert filter.op_string == "=="
        return FakeQuery(self.docs, filter.field_path, filter.value)


class FakeFirestore:
    """Just enough of firestore.AsyncClient for CreditService."""

    def __init__(self):
        self.collections: Dict[str, List[FakeDocumentReference]] = {}

    def add_user(self, doc_id: str, collection: str = "users", **data) -> FakeDocumentReference:
        ref = FakeDocumentReference(doc_id, data)
        self.collections.setdefault(collection, []).append(ref)
        return ref

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self.collections.setdefault(name, []))


@pytest.fixture
def fake_db() -> FakeFirestore:
    return FakeFirestore()
