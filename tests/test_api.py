"""API tests over an in-memory repository. /health and /api/contacts do not require Neo4j."""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from contactbook.application import StoreError
from contactbook.config import Settings
from contactbook.infrastructure import InMemoryContactRepository

BASE = "/api/contacts"


@pytest.fixture
def client():
    app = create_app(Settings(), repository=InMemoryContactRepository())
    with TestClient(app) as c:
        yield c


def _create(client, name: str, email: str, phone: str = "1") -> dict:
    r = client.post(BASE, json={"name": name, "email": email, "phone": phone})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_create_then_duplicate_email(client):
    r = client.post(BASE, json={"name": "A", "email": "a@x.com", "phone": "1"})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Contact created successfully"
    data = body["data"]
    assert data["id"]
    assert data["email"] == "a@x.com"
    assert data["createdAt"] == data["updatedAt"]

    r2 = client.post(BASE, json={"name": "A2", "email": "A@X.com", "phone": "2"})
    assert r2.status_code == 400
    assert r2.json() == {
        "success": False,
        "message": "Contact with this email already exists",
    }


def test_create_missing_fields_is_validation_error(client):
    r = client.post(BASE, json={"name": "Only name"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert {e["field"] for e in body["errors"]} == {"email", "phone"}


def test_create_with_wrong_type_is_validation_error(client):
    r = client.post(BASE, json={"name": 123, "email": "n@x.com", "phone": "1"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "name"


def test_get_by_id_and_missing(client):
    created = _create(client, "Bob", "bob@example.com")
    r = client.get(f"{BASE}/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": created}

    missing = client.get(f"{BASE}/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Contact not found"}


def test_list_second_page(client):
    for i in range(15):
        _create(client, f"Person {i}", f"p{i}@example.com")

    r = client.get(BASE, params={"page": 2, "limit": 10})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["count"] == 5
    assert len(body["data"]) == 5
    assert body["totalCount"] == 15
    assert body["totalPages"] == 2
    assert body["currentPage"] == 2


def test_list_page_beyond_total_is_empty(client):
    _create(client, "Solo", "solo@example.com")
    r = client.get(BASE, params={"page": 9})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"] == []
    assert body["count"] == 0
    assert body["totalPages"] == 1


def test_list_defaults_and_lenient_params(client):
    _create(client, "One", "one@example.com")
    r = client.get(BASE, params={"page": "abc", "limit": "0", "sortBy": "bogus"})
    assert r.status_code == 200
    body = r.json()
    assert body["currentPage"] == 1
    assert body["totalPages"] == 1
    assert body["count"] == 1


def test_list_search_and_sort(client):
    _create(client, "Zoe Adams", "zoe@acme.com", "100")
    _create(client, "Yann Brown", "yann@globex.com", "200")
    _create(client, "Xia Adams", "xia@initech.com", "300")

    r = client.get(BASE, params={"search": "adams", "sortBy": "name", "order": "asc"})
    body = r.json()
    assert body["totalCount"] == 2
    assert [c["name"] for c in body["data"]] == ["Xia Adams", "Zoe Adams"]


def test_update_phone_only(client):
    created = _create(client, "Carol", "carol@example.com", "111")
    r = client.put(f"{BASE}/{created['id']}", json={"phone": "999"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Contact updated successfully"
    data = body["data"]
    assert data["phone"] == "999"
    assert data["name"] == "Carol"
    assert data["email"] == "carol@example.com"
    assert data["createdAt"] == created["createdAt"]
    assert data["updatedAt"] >= created["updatedAt"]


def test_update_email_own_value_and_collision(client):
    carol = _create(client, "Carol", "carol@example.com")
    dave = _create(client, "Dave", "dave@example.com")

    own = client.put(f"{BASE}/{carol['id']}", json={"email": "CAROL@example.com"})
    assert own.status_code == 200
    assert own.json()["data"]["email"] == "carol@example.com"

    clash = client.put(f"{BASE}/{dave['id']}", json={"email": "Carol@Example.com"})
    assert clash.status_code == 400
    assert clash.json()["message"] == "Another contact with this email already exists"


def test_update_missing_is_404(client):
    r = client.put(f"{BASE}/nope", json={"name": "X"})
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Contact not found"}


def test_update_blank_name_is_400(client):
    created = _create(client, "Eve", "eve@example.com")
    r = client.put(f"{BASE}/{created['id']}", json={"name": ""})
    assert r.status_code == 400
    assert r.json()["errors"] == [{"field": "name", "message": "Name cannot be empty"}]


def test_delete_then_get_is_404(client):
    created = _create(client, "Frank", "frank@example.com")
    r = client.delete(f"{BASE}/{created['id']}")
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Contact deleted successfully"
    assert body["data"] == created

    assert client.get(f"{BASE}/{created['id']}").status_code == 404
    assert client.delete(f"{BASE}/{created['id']}").status_code == 404


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json()["success"] is False


class BrokenRepository(InMemoryContactRepository):
    """Every read fails as if the database were unreachable."""

    def count(self, search):
        raise StoreError("connection refused")

    def get_by_id(self, contact_id):
        raise StoreError("connection refused")

    def find_one(self, *, email, exclude_id=None):
        raise StoreError("connection refused")

    def delete_by_id(self, contact_id):
        raise StoreError("connection refused")


@pytest.fixture
def broken_client():
    app = create_app(Settings(), repository=BrokenRepository())
    with TestClient(app) as c:
        yield c


@pytest.mark.parametrize(
    "method,path,payload,message",
    [
        ("GET", BASE, None, "Error fetching contacts"),
        ("GET", f"{BASE}/x", None, "Error fetching contact"),
        ("POST", BASE, {"name": "A", "email": "a@x.com", "phone": "1"}, "Error creating contact"),
        ("PUT", f"{BASE}/x", {"name": "A"}, "Error updating contact"),
        ("DELETE", f"{BASE}/x", None, "Error deleting contact"),
    ],
)
def test_store_error_is_500_with_generic_message(broken_client, method, path, payload, message):
    r = broken_client.request(method, path, json=payload)
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["message"] == message
    assert body["error"] == "connection refused"


def test_trailing_slash_is_served_without_redirect(client):
    r = client.post(
        f"{BASE}/",
        json={"name": "Slash", "email": "slash@example.com", "phone": "1"},
        follow_redirects=False,
    )
    assert r.status_code == 201

    listed = client.get(f"{BASE}/", follow_redirects=False)
    assert listed.status_code == 200
    assert listed.json()["totalCount"] == 1


def test_list_with_huge_page_returns_empty_envelope(client):
    _create(client, "One", "one@example.com")
    r = client.get(BASE, params={"page": "99999999999999999999", "limit": "99999999999999999999"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"] == []
