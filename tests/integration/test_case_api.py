"""HTTP tests for the case service against in-memory storage."""

import pytest
from fastapi.testclient import TestClient

from mq_case_service.api.deps import get_case_repository, get_identity_repository, get_settings
from mq_case_service.config import Settings
from mq_case_service.core.exceptions import RepositoryException
from mq_case_service.infrastructure.persistence import (
    InMemoryCaseRepository,
    InMemoryIdentityRepository,
)
from mq_case_service.main import app

from tests.payloads import case_payload, kiosk_manager_payload, user_payload


@pytest.fixture
def client():
    case_repository = InMemoryCaseRepository()
    identity_repository = InMemoryIdentityRepository()
    test_settings = Settings(storage_type="inmemory", case_list_limit=100)

    app.dependency_overrides[get_case_repository] = lambda: case_repository
    app.dependency_overrides[get_identity_repository] = lambda: identity_repository
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user(client):
    response = client.post("/user", json=user_payload())
    assert response.status_code == 200
    return response.json()["data"]


@pytest.fixture
def volunteer(client):
    response = client.post("/kiosk/manager", json=kiosk_manager_payload())
    assert response.status_code == 200
    return response.json()["data"]


@pytest.fixture
def case(client, user):
    response = client.post(f"/user/{user['uid']}/case", json=case_payload())
    assert response.status_code == 200
    return response.json()["data"]


def assert_envelope(response, status_code, message=None):
    body = response.json()
    assert response.status_code == status_code
    assert body["status"] == status_code
    assert set(body) == {"status", "message", "data"}
    if message is not None:
        assert body["message"] == message
    return body


@pytest.mark.integration
class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "mq-case-service"
        assert body["storage"] == "inmemory"


@pytest.mark.integration
class TestCaseEndpoints:
    def test_create_case(self, client, user):
        response = client.post(f"/user/{user['uid']}/case", json=case_payload(whatsappCall=True))
        body = assert_envelope(response, 200, "Case created.")

        data = body["data"]
        assert data["userId"] == user["uid"]
        assert data["queueNo"] == 1
        assert data["refId"] == "123-05-67-560123"
        assert data["status"] == "open"
        assert data["category"] == "normal"
        assert data["whatsappCall"] is True

    def test_create_case_missing_subject(self, client, user):
        response = client.post(f"/user/{user['uid']}/case", json={"location": "L1"})
        assert_envelope(response, 400, "subject is required.")

    def test_create_case_unknown_user(self, client):
        response = client.post("/user/missing/case", json=case_payload())
        assert_envelope(response, 404, "User not found")

    def test_second_open_case_conflicts(self, client, user, case):
        response = client.post(f"/user/{user['uid']}/case", json=case_payload())
        assert_envelope(response, 409, "User already has an open case.")

    def test_get_case(self, client, case):
        body = assert_envelope(client.get(f"/case/{case['uid']}"), 200, "Case retrieved.")
        assert body["data"]["uid"] == case["uid"]

    def test_get_missing_case(self, client):
        body = assert_envelope(client.get("/case/missing"), 404, "Case not found")
        assert body["data"] == {"uid": "missing"}

    def test_list_cases(self, client, case):
        body = assert_envelope(client.get("/case", params={"status": "open", "sort": "1"}), 200, "Cases retrieved.")
        assert [c["uid"] for c in body["data"]] == [case["uid"]]

    def test_list_rejects_unknown_status(self, client, case):
        response = client.get("/case", params={"status": "bogus"})
        assert_envelope(response, 400, "status can only be [open|processing|closed|completed].")

    def test_list_rejects_unknown_sort(self, client):
        assert_envelope(client.get("/case", params={"sort": "up"}), 400)

    @pytest.mark.parametrize("method", ["patch", "post"])
    def test_assign(self, client, case, volunteer, method):
        response = getattr(client, method)(f"/case/{case['uid']}/assign", json={"assignee": volunteer["uid"]})
        body = assert_envelope(response, 200, "Case is assigned.")

        assert body["data"]["status"] == "processing"
        assert body["data"]["assignee"] == volunteer["uid"]

    def test_assign_without_body(self, client, case):
        response = client.patch(f"/case/{case['uid']}/assign")
        assert_envelope(response, 400, "body.assignee is required (uuid of volunteer)")

    def test_assign_unknown_volunteer(self, client, case):
        response = client.patch(f"/case/{case['uid']}/assign", json={"assignee": "nobody"})
        assert_envelope(response, 404, "volunteer does not exist.")

    def test_assign_twice(self, client, case, volunteer):
        client.patch(f"/case/{case['uid']}/assign", json={"assignee": volunteer["uid"]})
        response = client.patch(f"/case/{case['uid']}/assign", json={"assignee": volunteer["uid"]})
        assert_envelope(response, 400, "Case is not open.")

    def test_categorize(self, client, case):
        response = client.post(f"/case/{case['uid']}/categorize", json={"category": "welfare"})
        body = assert_envelope(response, 200, "Case is categorized as welfare.")
        assert body["data"]["category"] == "welfare"

    def test_close(self, client, case):
        response = client.patch(f"/case/{case['uid']}", json={"status": "completed"})
        body = assert_envelope(response, 200, "Case is updated and closed.")
        assert body["data"]["status"] == "completed"

        again = client.post(f"/case/{case['uid']}/close", json={"status": "closed"})
        assert_envelope(again, 400, "Case is closed.")

    def test_close_with_open_status(self, client, case):
        response = client.patch(f"/case/{case['uid']}", json={"status": "open"})
        assert_envelope(response, 400, "closing status can only be [closed|completed].")

    def test_delete(self, client, case):
        response = client.delete(f"/case/{case['uid']}")
        body = assert_envelope(response, 200, f"Case '{case['uid']}' delete successfully")
        assert body["data"]["uid"] == case["uid"]

        assert_envelope(client.delete(f"/case/{case['uid']}"), 400, "Something went wrong, case not deleted.")


@pytest.mark.integration
class TestUserEndpoints:
    def test_list_users(self, client, user):
        body = assert_envelope(client.get("/user"), 200, "Users retrieved.")
        assert [u["uid"] for u in body["data"]] == [user["uid"]]

    def test_user_uses_camel_case(self, user):
        assert user["maritalStatus"] == "married"
        assert user["blockHseNo"] == "123"
        assert "phoneId" in user

    def test_duplicate_phone(self, client, user):
        response = client.post("/user", json=user_payload(email="other@example.com"))
        assert_envelope(response, 409, "Duplicates found: 'number'")

    def test_malformed_body(self, client):
        response = client.post("/user", json={"phone": "not-an-object"})
        assert_envelope(response, 400)

    def test_search(self, client, user):
        response = client.post("/user/search", json={"phone": {"countryCode": "65", "number": "91234567"}})
        body = assert_envelope(response, 200, "User found.")
        assert body["data"]["uid"] == user["uid"]

    def test_search_miss(self, client):
        response = client.post("/user/search", json={"phone": {"countryCode": "65", "number": "90000000"}})
        assert_envelope(response, 404, "User not found")

    def test_update(self, client, user):
        response = client.patch(f"/user/{user['uid']}", json={"occupation": "nurse"})
        body = assert_envelope(response, 200, "User updated.")
        assert body["data"]["occupation"] == "nurse"

    def test_delete_by_email(self, client, user):
        response = client.request("DELETE", "/user", json={"email": user["email"]})
        assert_envelope(response, 200, f"User '{user['email']}' delete successfully")
        assert client.get("/user").json()["data"] == []

    def test_delete_without_selector(self, client):
        response = client.request("DELETE", "/user", json={})
        assert_envelope(response, 400, "Email or phone is required")


@pytest.mark.integration
class TestKioskManagerEndpoints:
    def test_list(self, client, volunteer):
        body = assert_envelope(client.get("/kiosk/manager"), 200)
        assert [m["uid"] for m in body["data"]] == [volunteer["uid"]]
        assert body["data"][0]["firstName"] == "Siti"

    def test_missing_fields(self, client):
        response = client.post("/kiosk/manager", json={"email": "a@example.com"})
        assert_envelope(response, 400, "email, firstName, lastName, kioskPhone is required")

    def test_delete(self, client, volunteer):
        assert_envelope(client.delete(f"/kiosk/manager/{volunteer['uid']}"), 200)
        assert_envelope(client.delete(f"/kiosk/manager/{volunteer['uid']}"), 404)


@pytest.mark.integration
def test_full_lifecycle(client):
    user = client.post("/user", json=user_payload()).json()["data"]
    volunteer = client.post("/kiosk/manager", json=kiosk_manager_payload()).json()["data"]

    first = client.post(f"/user/{user['uid']}/case", json=case_payload(location="Kiosk-A")).json()["data"]
    client.patch(f"/case/{first['uid']}/assign", json={"assignee": volunteer["uid"]})
    closed = client.patch(f"/case/{first['uid']}", json={"status": "completed"}).json()["data"]
    assert closed["status"] == "completed"

    second = client.post(f"/user/{user['uid']}/case", json=case_payload(location="Kiosk-A")).json()["data"]
    assert second["queueNo"] == 2

    listed = client.get("/case", params={"location": "Kiosk-A"}).json()["data"]
    assert [c["uid"] for c in listed] == [second["uid"], first["uid"]]


@pytest.mark.integration
def test_unknown_route_uses_envelope(client):
    assert_envelope(client.get("/nowhere"), 404, "Not Found")


@pytest.mark.integration
class TestPhoneEndpoints:
    def test_create_list_delete(self, client):
        body = {"phone": {"countryCode": "65", "number": "91234567"}}
        created = assert_envelope(client.post("/phone", json=body), 200, "Phone created.")
        assert created["data"]["countryCode"] == "65"

        listed = assert_envelope(client.get("/phone"), 200, "Phones retrieved.")
        assert [p["id"] for p in listed["data"]] == [created["data"]["id"]]

        response = client.request("DELETE", "/phone", json=body)
        assert_envelope(response, 200, "Phone '6591234567' delete successfully")
        assert client.get("/phone").json()["data"] == []

    def test_create_invalid(self, client):
        response = client.post("/phone", json={"phone": {"countryCode": "65", "number": "123"}})
        assert_envelope(response, 400, "phone.number needs to be 8-digit long.")

    def test_delete_missing(self, client):
        response = client.request("DELETE", "/phone", json={"phone": {"countryCode": "65", "number": "90000000"}})
        assert_envelope(response, 400, "Something went wrong, phone '6590000000' not deleted.")

    def test_kiosk_phones_are_separate(self, client):
        body = {"kioskPhone": {"countryCode": "65", "number": "81234567"}}
        assert_envelope(client.post("/kiosk/phone", json=body), 200, "Kiosk phone created.")

        assert len(client.get("/kiosk/phone").json()["data"]) == 1
        assert client.get("/phone").json()["data"] == []

        response = client.request("DELETE", "/kiosk/phone", json=body)
        assert_envelope(response, 200, "Kiosk phone '6581234567' delete successfully")


@pytest.mark.integration
class TestKioskManagerDeleteBySelector:
    def test_by_email(self, client, volunteer):
        response = client.request("DELETE", "/kiosk/manager", json={"email": volunteer["email"]})
        body = assert_envelope(response, 200, f"Kiosk manager '{volunteer['email']}' delete successfully")
        assert body["data"]["uid"] == volunteer["uid"]
        assert client.get("/kiosk/manager").json()["data"] == []

    def test_by_kiosk_phone(self, client, volunteer):
        payload = {"kioskPhone": {"countryCode": "65", "number": "81234567"}}
        response = client.request("DELETE", "/kiosk/manager", json=payload)
        assert_envelope(response, 200, "Kiosk manager '6581234567' delete successfully")

    def test_unknown(self, client):
        response = client.request("DELETE", "/kiosk/manager", json={"email": "nobody@example.com"})
        assert_envelope(response, 400, "KioskManager not found")


class BrokenCaseRepository(InMemoryCaseRepository):
    async def list(self, case_filter, limit=100):
        raise RepositoryException("connection reset by peer")


@pytest.mark.integration
def test_storage_failure_is_generic_500(client):
    app.dependency_overrides[get_case_repository] = BrokenCaseRepository

    body = assert_envelope(client.get("/case"), 500, "Internal server error.")

    assert body["data"] is None
    assert "connection reset" not in client.get("/case").text
