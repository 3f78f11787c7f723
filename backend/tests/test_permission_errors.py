"""
Firestore security-rule denials surface as 403 responses for the request
that caused them, carrying the denied operation and path.
"""
import pytest

from educonnect.errors import PermissionDeniedError
from educonnect.services.firestore_service import get_document, guarded

from fakes import TEACHER


def test_guarded_translates_permission_denied(db):
    db.deny("get", "classes")

    with pytest.raises(PermissionDeniedError) as excinfo:
        get_document(db, "classes", "class-1")

    assert excinfo.value.operation == "get"
    assert excinfo.value.path == "classes/class-1"
    assert excinfo.value.status_code == 403


def test_guarded_leaves_other_errors_alone():
    with pytest.raises(KeyError):
        with guarded("get", "users/x"):
            raise KeyError("x")


def test_denied_list_becomes_403_response(client, db, login_as):
    login_as(TEACHER["id"])
    db.deny("list", "classes")

    resp = client.get("/api/classes")

    assert resp.status_code == 403
    body = resp.json()
    assert body["operation"] == "list"
    assert body["path"] == "classes"
    assert "insufficient permissions" in body["detail"]


def test_denied_create_becomes_403_response(client, db):
    db.deny("create", "supportTickets")

    resp = client.post("/api/support/tickets", json={"message": "App crashes on login"})

    assert resp.status_code == 403
    assert resp.json()["operation"] == "create"


def test_denial_does_not_leak_into_next_request(client, db):
    db.deny("create", "supportTickets")
    assert client.post("/api/support/tickets", json={"message": "first"}).status_code == 403

    assert client.get("/api/rewards/status").status_code == 200


def test_missing_profile_is_forbidden(client, login_as):
    login_as("no-profile-uid")

    resp = client.get("/me")

    assert resp.status_code == 403
