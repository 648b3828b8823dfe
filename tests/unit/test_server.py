"""Tests for the HTTP logout endpoint."""

from unittest.mock import Mock

import pytest

from src.forcelogout.bulk.batch import BatchOptions
from src.forcelogout.exceptions import RemoteError
from src.forcelogout.server import create_app
from src.forcelogout.utils.config import ServerConfig
from tests.fixtures.identity import InMemoryIdentityService, make_users

SECRET = "s3cret"
FAST_OPTIONS = BatchOptions(base_delay=0, soft_pacing_delay=0)


@pytest.fixture
def identity():
    return InMemoryIdentityService(make_users(3))


def make_client(identity, enabled=True, secret=SECRET, excluded=()):
    app = create_app(
        ServerConfig(logout_enabled=enabled, api_secret=secret),
        identity_factory=lambda: identity,
        excluded_ids=excluded,
        options=FAST_OPTIONS,
    )
    app.config["TESTING"] = True
    return app.test_client()


class TestHealth:
    """Test cases for GET /."""

    def test_health_reports_gate_state(self, identity):
        response = make_client(identity, enabled=False).get("/")

        assert response.status_code == 200
        assert response.get_json() == {
            "status": "ok",
            "service": "forcelogout",
            "logout_enabled": False,
        }


class TestForceLogout:
    """Test cases for POST /force-logout."""

    def test_disabled_returns_403(self, identity):
        client = make_client(identity, enabled=False)

        response = client.post(f"/force-logout?key={SECRET}")

        assert response.status_code == 403
        assert identity.calls == []
        assert identity.page_requests == []

    def test_missing_key_returns_401(self, identity):
        response = make_client(identity).post("/force-logout")

        assert response.status_code == 401
        assert identity.page_requests == []

    def test_wrong_key_returns_401(self, identity):
        response = make_client(identity).post("/force-logout", headers={"X-API-Key": "guess"})

        assert response.status_code == 401

    def test_unset_secret_rejects_every_request(self, identity):
        client = make_client(identity, secret=None)

        assert client.post("/force-logout?key=").status_code == 401
        assert client.post("/force-logout?key=None").status_code == 401

    def test_soft_logout_with_query_key(self, identity):
        client = make_client(identity, excluded=["user-1"])

        response = client.post(f"/force-logout?key={SECRET}")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "success"
        assert body["message"] == "Logout process completed"
        assert body["details"]["success"] == 2
        assert body["details"]["skipped"] == 1
        assert body["details"]["total"] == 3
        assert body["details"]["mode"] == "soft"
        assert identity.calls_for("user-1") == []
        assert identity.calls_for("user-0") == ["revoke"]

    def test_immediate_from_json_body(self, identity):
        client = make_client(identity)

        response = client.post(
            "/force-logout", json={"immediate": True}, headers={"X-API-Key": SECRET}
        )

        assert response.status_code == 200
        assert response.get_json()["details"]["mode"] == "hard"
        assert identity.calls_for("user-0") == ["disable", "revoke", "enable"]

    def test_immediate_from_query(self, identity):
        client = make_client(identity)

        response = client.post(f"/force-logout?key={SECRET}&immediate=true")

        assert response.get_json()["details"]["mode"] == "hard"

    def test_immediate_requires_literal_true(self, identity):
        client = make_client(identity)

        response = client.post(f"/force-logout?key={SECRET}", json={"immediate": "yes"})

        assert response.get_json()["details"]["mode"] == "soft"

    def test_per_user_failures_are_reported(self, identity):
        identity.fail("revoke", "user-2", RemoteError("revoke rejected"))
        client = make_client(identity)

        response = client.post(f"/force-logout?key={SECRET}")

        assert response.status_code == 200
        details = response.get_json()["details"]
        assert details["failed"] == 1
        assert details["errors"][0]["uid"] == "user-2"
        assert details["errors"][0]["error"] == "revoke rejected"

    def test_fatal_error_returns_500(self, identity):
        identity.list_failures[0] = RemoteError("listing unavailable")
        client = make_client(identity)

        response = client.post(f"/force-logout?key={SECRET}")

        assert response.status_code == 500
        body = response.get_json()
        assert body["status"] == "error"
        assert "listing unavailable" in body["error"]

    def test_identity_factory_failure_returns_500(self):
        factory = Mock(side_effect=RuntimeError("no credentials"))
        app = create_app(ServerConfig(logout_enabled=True, api_secret=SECRET), factory)

        response = app.test_client().post(f"/force-logout?key={SECRET}")

        assert response.status_code == 500
        assert response.get_json()["error"] == "no credentials"
