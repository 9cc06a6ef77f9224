import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["MIDTRANS_SERVER_KEY"] = "test-server-key"
os.environ["MIDTRANS_CLIENT_KEY"] = "test-client-key"
os.environ["BITESHIP_ORIGIN_AREA_ID"] = "IDNP6IDNC148IDND836IDZ12410"
os.environ["BREVO_API_KEY"] = ""
os.environ["UPLOAD_DIR"] = os.path.join(tempfile.gettempdir(), "gitarin_test_uploads")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.database import engine, get_session
from app.main import app
from app.models.user import UserRole
from app.services.biteship_client import get_logistics_client
from app.services.midtrans_gateway import get_payment_gateway
from tests.factories import FakeGateway, FakeLogistics, make_category, make_user


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def logistics():
    return FakeLogistics()


@pytest.fixture
def client(session, gateway, logistics):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_logistics_client] = lambda: logistics
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def customer(session):
    return make_user(session)


@pytest.fixture
def other_customer(session):
    return make_user(session, email="siti@example.com", name="Siti")


@pytest.fixture
def admin(session):
    return make_user(session, email="admin@gitarin.id", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
def gudang(session):
    return make_user(session, email="gudang@gitarin.id", role=UserRole.GUDANG, name="Gudang")


@pytest.fixture
def category(session):
    return make_category(session)
