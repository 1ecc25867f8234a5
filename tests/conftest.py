import os
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.security import create_access_token
from app.catalog.models import Course, Ebook
from app.database import Base, get_db
from app.ebooks.storage import StorageClient, get_storage_client
from app.main import app
from app.payments.ids import build_payment_id
from app.payments.portone import PortOneClient, get_payment_client

# In-memory SQLite by default, override with TEST_DATABASE_URL (e.g. Postgres)
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

if TEST_DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(TEST_DATABASE_URL, pool_pre_ping=True)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PORTONE_URL = "https://api.portone.test"
SUPABASE_URL = "https://project.supabase.test"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh schema and session for each test."""
    # Import models to register them
    from app.auth import models  # noqa: F401
    from app.catalog import models as catalog_models  # noqa: F401
    from app.purchases import models as purchases_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class FakePortOne:
    """PortOne payments API served from a dict through httpx.MockTransport."""

    def __init__(self):
        self.payments: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None

    def add_payment(self, payment_id: str, status: str = "PAID", total: object = 10000) -> None:
        self.payments[payment_id] = {
            "id": payment_id,
            "status": status,
            "amount": {"total": total},
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, text="upstream unavailable")

        payment_id = request.url.path.rsplit("/", 1)[-1]
        payment = self.payments.get(payment_id)
        if payment is None:
            return httpx.Response(404, json={"type": "PAYMENT_NOT_FOUND"})
        return httpx.Response(200, json=payment)

    def client(self) -> PortOneClient:
        return PortOneClient(
            api_url=PORTONE_URL,
            api_secret="test-secret",
            transport=httpx.MockTransport(self.handler),
        )


class FakeStorage:
    """Supabase Storage sign endpoint through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Object not found"})

        path = request.url.path.split("/object/sign/", 1)[-1]
        return httpx.Response(200, json={"signedURL": f"/object/sign/{path}?token=signed"})

    def client(self) -> StorageClient:
        return StorageClient(
            supabase_url=SUPABASE_URL,
            service_role_key="service-role",
            bucket="ebooks",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def portone():
    return FakePortOne()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture(scope="function")
def client(db_session, portone, storage):
    """Create a test client with database session and fake upstreams."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_client] = portone.client
    app.dependency_overrides[get_storage_client] = storage.client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def auth_headers(user_id):
    """Get authorization headers for the test user."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def create_course(db_session, price: int = 10000, course_id: uuid.UUID | None = None) -> Course:
    """Helper to create a catalog course."""
    course = Course(id=course_id or uuid.uuid4(), title="Python Basics", price=price, published=True)
    db_session.add(course)
    db_session.commit()
    return course


def create_ebook(
    db_session,
    price: int = 15000,
    full_pdf_path: str | None = "pdfs/ebook.pdf",
) -> Ebook:
    """Helper to create a catalog e-book."""
    ebook = Ebook(
        id=uuid.uuid4(),
        title="Data Science Handbook",
        price=price,
        published=True,
        full_pdf_path=full_pdf_path,
    )
    db_session.add(ebook)
    db_session.commit()
    return ebook


@pytest.fixture
def make_payment_id():
    def _make(item_id: uuid.UUID, user_id: uuid.UUID, now_ms: int = 1700000000) -> str:
        return build_payment_id(item_id, user_id, now_ms)
    return _make


@pytest.fixture
def make_course(db_session):
    def _make(price: int = 10000, course_id: uuid.UUID | None = None) -> Course:
        return create_course(db_session, price, course_id)
    return _make


@pytest.fixture
def make_ebook(db_session):
    def _make(price: int = 15000, full_pdf_path: str | None = "pdfs/ebook.pdf") -> Ebook:
        return create_ebook(db_session, price, full_pdf_path)
    return _make
