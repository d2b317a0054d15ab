import os
import tempfile
from uuid import UUID

# La configuración se lee al importar app: fijarla antes
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="finance-uploads-")
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.models import budget, receipt, recurring_transaction, transaction, user  # noqa: F401
from app.core.security import get_current_user
from app.database import get_session
from app.main import app
from app.services.receipt_extractor import get_receipt_extractor

USER_ID = UUID("11111111-1111-1111-1111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-2222-2222-222222222222")


class FakeExtractor:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {}
        self.error = error
        self.calls = []

    def extract(self, content, mime_type):
        self.calls.append((content, mime_type))
        if self.error:
            raise self.error
        return dict(self.result)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def extractor():
    return FakeExtractor({
        "merchant": "Walmart",
        "amount": 42.97,
        "date": "2025-09-13",
        "category": "Groceries",
    })


@pytest.fixture
def anon_client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client, extractor):
    app.dependency_overrides[get_current_user] = lambda: USER_ID
    app.dependency_overrides[get_receipt_extractor] = lambda: extractor
    return anon_client


@pytest.fixture
def login_as():
    """Cambia el usuario autenticado del client."""
    def _login_as(user_id: UUID):
        app.dependency_overrides[get_current_user] = lambda: user_id
    return _login_as
