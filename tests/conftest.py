import os
from datetime import datetime, timezone

# Configuration is read at import time
os.environ.setdefault("ZAPSHIFT_STRIPE_SECRET_KEY", "sk_test_zapshift")
os.environ.setdefault("ZAPSHIFT_SITE_DOMAIN", "http://localhost:5173")

import pytest
from fastapi.testclient import TestClient

from app.models.users import AuthenticatedUser
from app.server.main import app
from app.services.firestore_service import USERS, get_firestore_service
from app.services.identity import get_token_verifier
from app.services.payments.stripe import get_checkout_provider
from tests.fakes import FakeCheckoutProvider, FakeTokenVerifier, InMemoryFirestoreService

USER_EMAIL = "a@b.com"
ADMIN_EMAIL = "admin@zapshift.com"
OTHER_EMAIL = "c@d.com"


@pytest.fixture
def firestore():
    service = InMemoryFirestoreService()
    service.seed(
        USERS,
        {
            "email": ADMIN_EMAIL,
            "displayName": "Admin",
            "role": "admin",
            "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
        },
        document_id="admin-user",
    )
    service.seed(
        USERS,
        {
            "email": USER_EMAIL,
            "displayName": "Alice Sender",
            "role": "user",
            "createdAt": datetime(2024, 2, 1, tzinfo=timezone.utc),
        },
        document_id="plain-user",
    )
    return service


@pytest.fixture
def checkout():
    return FakeCheckoutProvider()


@pytest.fixture
def verifier():
    return FakeTokenVerifier(
        {
            "user-token": AuthenticatedUser(uid="uid-user", email=USER_EMAIL),
            "admin-token": AuthenticatedUser(uid="uid-admin", email=ADMIN_EMAIL),
            "other-token": AuthenticatedUser(uid="uid-other", email=OTHER_EMAIL),
        }
    )


@pytest.fixture
def client(firestore, checkout, verifier):
    app.dependency_overrides[get_firestore_service] = lambda: firestore
    app.dependency_overrides[get_checkout_provider] = lambda: checkout
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
