"""Integration tests for /products and /protected/dashboard."""

from __future__ import annotations

import pytest

PRODUCT = {"name": "Keyboard", "description": "Mechanical keyboard", "price": 89.9, "stock": 12}


@pytest.fixture
def access_token(client, backend) -> str:
    client.post(
        "/auth/register",
        json={"email": "ada@example.com", "password": "correct-horse", "firstName": "Ada"},
    )
    client.post("/auth/login", json={"email": "ada@example.com", "password": "correct-horse"})
    resp = client.post(
        "/auth/verify-mfa",
        json={"email": "ada@example.com", "code": backend.email.last_code()},
    )
    return resp.json()["tokens"]["accessToken"]


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestProducts:
    def test_list_is_public(self, client):
        resp = client.get("/products")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": []}

    def test_create_requires_auth(self, client):
        assert client.post("/products", json=PRODUCT).status_code == 401

    def test_create_and_list(self, client, access_token):
        resp = client.post("/products", json=PRODUCT, headers=_bearer(access_token))
        assert resp.status_code == 201
        created = resp.json()["data"]
        assert created["name"] == "Keyboard"
        assert created["id"]
        assert created["createdAt"]

        listed = client.get("/products").json()["data"]
        assert [p["id"] for p in listed] == [created["id"]]

    @pytest.mark.parametrize(
        "overrides",
        [{"stock": 500}, {"price": -5}, {"name": "ab"}],
        ids=["stock_cap", "negative_price", "short_name"],
    )
    def test_create_validation(self, client, access_token, overrides):
        resp = client.post(
            "/products", json={**PRODUCT, **overrides}, headers=_bearer(access_token)
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"


class TestDashboard:
    def test_greets_token_user(self, client, access_token):
        resp = client.get("/protected/dashboard", headers=_bearer(access_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["email"] == "ada@example.com"
        assert "Ada" in body["message"]
        assert body["timestamp"]

    def test_requires_auth(self, client):
        assert client.get("/protected/dashboard").status_code == 401
