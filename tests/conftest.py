import os

# Must be set before the application modules read their configuration
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MAIL_DRIVER", "log")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app import app
from core.database import get_db, init_db, register_sqlite_functions
from utils.book_manager import BookManager
from utils.list_cache import ListCache, get_list_cache
from utils.notifier import MailTransport, Notifier, get_notifier
from utils.permission_manager import PermissionManager
from utils.user_manager import UserManager


class RecordingTransport(MailTransport):
    """Keeps sent messages in memory."""

    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


@pytest.fixture
def engine(tmp_path):
    # A file database so that separate sessions see each other's commits
    engine = create_engine(
        f"sqlite:///{tmp_path / 'library.db'}",
        connect_args={"check_same_thread": False},
    )
    register_sqlite_functions(engine)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        PermissionManager(db).seed_defaults()
    finally:
        db.close()
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def cache():
    return ListCache()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def notifier(transport):
    return Notifier(transport=transport)


@pytest.fixture
def books(db, cache):
    return BookManager(db, cache)


@pytest.fixture
def make_user(db):
    users = UserManager(db)

    def _make(name="Alice", email=None, role="user", password="secret123"):
        email = email or f"{name.lower()}@example.com"
        return users.create_user(name=name, email=email, password=password, role_slug=role)

    return _make


@pytest.fixture
def background_tasks():
    return BackgroundTasks()


@pytest.fixture
def client(session_factory, cache, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_list_cache] = lambda: cache
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(name, email=None, role="user", password="secret123"):
        email = email or f"{name.lower()}@example.com"
        response = client.post(
            f"/api/{role}/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 200, response.json()
        return response.json()["data"]["user"]

    return _register


@pytest.fixture
def login(client):
    def _login(email, password="secret123"):
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.json()
        token = response.json()["data"]["token"]
        return {"Authorization": f"Bearer {token.split(' ', 1)[1]}"}

    return _login


@pytest.fixture
def admin_headers(register, login):
    register("Admin", "admin@example.com", role="admin")
    return login("admin@example.com")


@pytest.fixture
def user_headers(register, login):
    register("Alice", "alice@example.com")
    return login("alice@example.com")
