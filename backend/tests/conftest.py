import pytest
from fastapi.testclient import TestClient

from educonnect.main import app
from educonnect.auth.dependencies import get_current_user
from educonnect.services import ai_service
from educonnect.services.firestore_service import get_db
from educonnect.services.payment_service import PaymentSimulatorRegistry

from fakes import ADMIN, STUDENT, TEACHER, FakeFirestore


@pytest.fixture
def db():
    fake = FakeFirestore()
    for user in (TEACHER, STUDENT, ADMIN):
        fake.put("users", user["id"], user)
    return fake


@pytest.fixture
def current_user():
    """Mutable holder for the signed-in uid; tests switch users with ``login_as``."""
    return {"uid": STUDENT["id"]}


@pytest.fixture
def login_as(current_user):
    def _login(uid: str) -> None:
        current_user["uid"] = uid
    return _login


@pytest.fixture
def client(db, current_user):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: {
        "uid": current_user["uid"],
        "email": None,
        "email_verified": False,
        "name": None,
        "phone_number": None,
    }
    app.state.payment_simulators = PaymentSimulatorRegistry(processing_delay=0, success_reset_delay=60)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_openai(monkeypatch):
    """Install a fake OpenAI client; call with the replies it should return."""
    def _install(client):
        monkeypatch.setattr(ai_service, "_client", client)
        return client
    return _install
