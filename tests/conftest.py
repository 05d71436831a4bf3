import os
import tempfile

# Settings are read at import time; configure before storefront is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_INIT_MODE", "off")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "storefront-tests.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.database import Base, get_db
from storefront.main import app
from storefront.repositories.users import UserRepository

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def create_user(session_factory):
    """Insert a user directly and return its id"""

    def _create(email, password=DEFAULT_PASSWORD, role="user", **fields):
        session = session_factory()
        try:
            user = UserRepository(session).create(
                email=email,
                password=password,
                first_name="Test",
                last_name="User",
                role=role,
            )
            for name, value in fields.items():
                setattr(user, name, value)
            session.commit()
            return user.id
        finally:
            session.close()

    return _create


@pytest.fixture
def login(client):
    """Log in through the API and return the response body's data"""

    def _login(email, password=DEFAULT_PASSWORD):
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        data["refreshToken"] = response.cookies["refreshToken"]
        return data

    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie(token):
    return {"Cookie": f"refreshToken={token}"}
