"""Pytest configuration and fixtures."""

import os
import secrets
from datetime import datetime, timedelta
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Unique per run so test tokens are never valid elsewhere
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"
TEST_ADMIN_KEY = "Test-Admin-Key-123"

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)
os.environ.setdefault("ADMIN_API_KEY", TEST_ADMIN_KEY)
os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

import mowsy.models  # noqa: E402,F401
from mowsy.core.database import Base, get_db  # noqa: E402
from mowsy.main import app  # noqa: E402
from mowsy.services.errors import UpstreamError  # noqa: E402
from mowsy.services.geocoding import GeocodeResult, GeocodioService, get_geocoding_service  # noqa: E402
from mowsy.services.payments import IntentResult, PaymentProcessor, get_payment_processor  # noqa: E402
from mowsy.services.storage import StorageProviderInterface, UploadService, get_upload_service  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-1"


class FakePaymentProcessor(PaymentProcessor):
    """In-memory stand-in for Stripe. Intents start as requires_payment_method."""

    def __init__(self):
        self.customers: dict[str, str] = {}
        self.intents: dict[str, IntentResult] = {}
        self.created: list[dict] = []

    async def create_customer(self, email: str, name: str, user_id: int) -> str:
        customer_id = f"cus_test_{user_id}"
        self.customers[customer_id] = email
        return customer_id

    async def create_intent(self, amount_cents, currency, customer_id, metadata) -> IntentResult:
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = IntentResult(
            id=intent_id,
            status="requires_payment_method",
            client_secret=f"{intent_id}_secret",
        )
        self.intents[intent_id] = intent
        self.created.append(
            {
                "amount_cents": amount_cents,
                "currency": currency,
                "customer_id": customer_id,
                "metadata": metadata,
            }
        )
        return intent

    async def retrieve_intent(self, intent_id: str) -> IntentResult:
        if intent_id not in self.intents:
            raise UpstreamError("failed to retrieve payment intent")
        return self.intents[intent_id]

    def set_status(self, intent_id: str, status: str) -> None:
        self.intents[intent_id].status = status


class FakeStorageProvider(StorageProviderInterface):
    """Keeps uploaded objects in a dict."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}

    async def upload_object(self, object_path, body, mime_type) -> str:
        self.objects[object_path] = body.read()
        return f"https://test-bucket.s3.amazonaws.com/{object_path}"

    async def generate_presigned_upload_url(self, object_path, mime_type, ttl_seconds):
        expires_at = datetime.utcnow() + timedelta(seconds=ttl_seconds)
        return f"https://test-bucket.s3.amazonaws.com/{object_path}?signature=test", expires_at

    async def delete_object(self, object_path) -> None:
        self.objects.pop(object_path, None)


def make_geocoder(locations: Optional[dict[str, GeocodeResult]] = None) -> MagicMock:
    """Geocoder mock resolving any query containing a known street; others fail."""
    locations = locations or {}

    async def geocode(query: str) -> GeocodeResult:
        for street, result in locations.items():
            if street in query:
                return result
        raise UpstreamError(f"no geocoding results found for: {query}")

    geocoder = MagicMock(spec=GeocodioService)
    geocoder.geocode = AsyncMock(side_effect=geocode)
    return geocoder


MAPLE_ST = GeocodeResult(
    latitude=44.98,
    longitude=-93.27,
    zip_code="55401",
    formatted_address="1 Maple St, Minneapolis, MN 55401",
    district_name="Minneapolis Public School District",
    district_code="2397",
)
OAK_AVE = GeocodeResult(
    latitude=44.95,
    longitude=-93.10,
    zip_code="55102",
    formatted_address="9 Oak Ave, St Paul, MN 55102",
    district_name="Minneapolis Public School District",
    district_code="2397",
)
ELM_RD = GeocodeResult(
    latitude=45.10,
    longitude=-93.40,
    zip_code="55369",
    formatted_address="5 Elm Rd, Maple Grove, MN 55369",
    district_name="Osseo Public School District",
    district_code="3347",
)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "mowsy_test.db"


@pytest.fixture
def sync_engine(db_path):
    """Schema created on a file database shared by sync and async engines."""
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sync_db(sync_engine):
    """Direct access for arranging state the API does not expose."""
    with Session(sync_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def async_session_maker(db_path, sync_engine):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(async_session_maker):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def geocoder():
    return make_geocoder({"Maple St": MAPLE_ST, "Oak Ave": OAK_AVE, "Elm Rd": ELM_RD})


@pytest.fixture
def payment_processor():
    return FakePaymentProcessor()


@pytest.fixture
def storage_provider():
    return FakeStorageProvider()


@pytest.fixture
def client(async_session_maker, geocoder, payment_processor, storage_provider):
    """Test client wired to the file database and in-memory collaborators."""

    async def override_get_db():
        async with async_session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocoding_service] = lambda: geocoder
    app.dependency_overrides[get_payment_processor] = lambda: payment_processor
    app.dependency_overrides[get_upload_service] = lambda: UploadService(storage_provider)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def api():
    from mowsy.core.config import get_settings

    return get_settings().api_v1_prefix


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": TEST_ADMIN_KEY}


@pytest.fixture
def register(client, api):
    """Register a user through the API and return (user, headers)."""

    def _register(email: str, address: Optional[str] = None, zip_code: Optional[str] = None, **extra):
        payload = {
            "email": email,
            "password": DEFAULT_PASSWORD,
            "first_name": extra.pop("first_name", "Test"),
            "last_name": extra.pop("last_name", "User"),
            "address": address,
            "city": "Minneapolis",
            "state": "MN",
            "zip_code": zip_code,
            **extra,
        }
        response = client.post(f"{api}/auth/register", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest.fixture
def verify_insurance(client, api, admin_headers):
    """Upload a document and have an admin verify it."""

    def _verify(user_id: int, headers: dict) -> None:
        response = client.post(
            f"{api}/users/me/insurance",
            json={"document_url": "https://docs.example.com/policy.pdf"},
            headers=headers,
        )
        assert response.status_code == 200, response.text
        response = client.put(f"{api}/admin/users/{user_id}/verify-insurance", headers=admin_headers)
        assert response.status_code == 200, response.text

    return _verify
