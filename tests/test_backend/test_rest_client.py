"""
Tests for the hosted REST backend client.

All HTTP traffic goes through ``httpx.MockTransport``; nothing touches the
network.

What we test
------------
- Query rendering: filters, null/bool filters, order, limit.
- Headers: apikey always, bearer switches to the session token.
- Error mapping: HTTP status and transport errors become PersistenceError
  or AuthError; empty PATCH/DELETE responses become NotFoundError.
- Owner-scoped writes add a user_id filter.
- Auth flows: sign-up with and without a session, sign-in, sign-out,
  get_user on an expired token.
"""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from product_tracker.backend.base import Order
from product_tracker.backend.factory import build_client
from product_tracker.backend.rest_client import RestClient
from product_tracker.config import AppConfig, BackendConfig
from product_tracker.errors import AuthError, NotFoundError, PersistenceError

BASE_URL = "https://tracker.example.test"
API_KEY = "anon-key"

_USER = {"id": "u1", "email": "sam@example.com", "created_at": "2025-01-01T00:00:00Z"}
_SESSION = {"access_token": "tok-123", "refresh_token": "ref-1", "user": _USER}


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> RestClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return RestClient(url=BASE_URL, api_key=API_KEY, http_client=http)


class _Recorder:
    """Handler that records requests and replies with a canned response."""

    def __init__(self, status: int = 200, body=None) -> None:
        self.requests: list[httpx.Request] = []
        self.status = status
        self.body = body if body is not None else []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


# ── Tables ────────────────────────────────────────────────────────────────────

class TestRestClientTables:
    async def test_select_renders_query(self):
        rec = _Recorder(body=[{"id": "p1"}])
        client = _client(rec)
        rows = await client.select(
            "products",
            filters={"user_id": "u1", "product_id": None, "is_read": False},
            order=Order("purchase_date"),
            limit=5,
        )
        assert rows == [{"id": "p1"}]
        req = rec.last
        assert req.method == "GET"
        assert req.url.path == "/rest/v1/products"
        params = req.url.params
        assert params["select"] == "*"
        assert params["user_id"] == "eq.u1"
        assert params["product_id"] == "is.null"
        assert params["is_read"] == "eq.false"
        assert params["order"] == "purchase_date.desc"
        assert params["limit"] == "5"
        assert req.headers["apikey"] == API_KEY
        assert req.headers["authorization"] == f"Bearer {API_KEY}"
        await client.close()

    async def test_ascending_order(self):
        rec = _Recorder()
        client = _client(rec)
        await client.select("products", order=Order("created_at", descending=False))
        assert rec.last.url.params["order"] == "created_at.asc"
        await client.close()

    async def test_insert_drops_nulls_and_returns_row(self):
        rec = _Recorder(status=201, body=[{"id": "p9", "name": "Canva"}])
        client = _client(rec)
        row = await client.insert("products", {"name": "Canva", "url": None})
        assert row == {"id": "p9", "name": "Canva"}
        assert json.loads(rec.last.content) == {"name": "Canva"}
        assert rec.last.headers["prefer"] == "return=representation"
        await client.close()

    async def test_update_targets_id(self):
        rec = _Recorder(body=[{"id": "p1", "price": 10}])
        client = _client(rec)
        row = await client.update("products", "p1", {"price": 10})
        assert row["price"] == 10
        assert rec.last.method == "PATCH"
        assert rec.last.url.params["id"] == "eq.p1"
        await client.close()

    async def test_owner_scope_added_to_writes(self):
        rec = _Recorder(body=[{"id": "p1"}])
        client = _client(rec)
        await client.update("products", "p1", {"price": 10}, owner_id="u1")
        assert rec.last.url.params["id"] == "eq.p1"
        assert rec.last.url.params["user_id"] == "eq.u1"

        await client.delete("products", "p1", owner_id="u1")
        assert rec.last.method == "DELETE"
        assert rec.last.url.params["user_id"] == "eq.u1"

        await client.select_one("ai_recommendations", "r1", owner_id="u1")
        assert rec.last.url.params["user_id"] == "eq.u1"
        assert rec.last.url.params["limit"] == "1"
        await client.close()

    async def test_unscoped_update_has_no_owner_filter(self):
        rec = _Recorder(body=[{"id": "u1"}])
        client = _client(rec)
        await client.update("user_profiles", "u1", {"budget": 5})
        assert "user_id" not in rec.last.url.params
        await client.close()

    async def test_update_missing_row(self):
        client = _client(_Recorder(body=[]))
        with pytest.raises(NotFoundError):
            await client.update("products", "ghost", {"price": 10})
        await client.close()

    async def test_delete_missing_row(self):
        client = _client(_Recorder(body=[]))
        with pytest.raises(NotFoundError):
            await client.delete("products", "ghost")
        await client.close()

    async def test_http_error_mapped(self):
        client = _client(_Recorder(status=400, body={"message": "violates check constraint"}))
        with pytest.raises(PersistenceError, match="violates check constraint"):
            await client.select("products")
        await client.close()

    async def test_transport_error_mapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(PersistenceError, match="unreachable"):
            await client.select("products")
        await client.close()


# ── Auth ──────────────────────────────────────────────────────────────────────

class TestRestAuthClient:
    async def test_sign_in_switches_bearer(self):
        rec = _Recorder(body=_SESSION)
        client = _client(rec)
        session = await client.auth.sign_in("sam@example.com", "secret123")
        assert session.access_token == "tok-123"
        assert rec.last.url.path == "/auth/v1/token"
        assert rec.last.url.params["grant_type"] == "password"

        rec.body = []
        await client.select("products")
        assert rec.last.headers["authorization"] == "Bearer tok-123"
        await client.close()

    async def test_sign_in_failure(self):
        client = _client(
            _Recorder(status=400, body={"error_description": "Invalid login credentials"})
        )
        with pytest.raises(AuthError, match="Invalid login credentials"):
            await client.auth.sign_in("sam@example.com", "wrong")
        assert client.auth.session is None
        await client.close()

    async def test_sign_up_with_session(self):
        client = _client(_Recorder(body=_SESSION))
        user = await client.auth.sign_up("sam@example.com", "secret123")
        assert user.id == "u1"
        assert client.auth.session is not None
        await client.close()

    async def test_sign_up_pending_confirmation(self):
        client = _client(_Recorder(body=_USER))
        user = await client.auth.sign_up("sam@example.com", "secret123")
        assert user.email == "sam@example.com"
        assert client.auth.session is None
        await client.close()

    async def test_sign_up_duplicate(self):
        client = _client(_Recorder(status=422, body={"msg": "User already registered"}))
        with pytest.raises(AuthError, match="already registered"):
            await client.auth.sign_up("sam@example.com", "secret123")
        await client.close()

    async def test_sign_out_clears_session(self):
        rec = _Recorder(body=_SESSION)
        client = _client(rec)
        await client.auth.sign_in("sam@example.com", "secret123")
        rec.status, rec.body = 204, {}
        await client.auth.sign_out()
        assert client.auth.session is None
        assert rec.last.url.path == "/auth/v1/logout"
        await client.close()

    async def test_get_user_expired_token(self):
        rec = _Recorder(body=_SESSION)
        client = _client(rec)
        await client.auth.sign_in("sam@example.com", "secret123")
        rec.status, rec.body = 401, {"msg": "JWT expired"}
        assert await client.auth.get_user() is None
        await client.close()

    async def test_get_user(self):
        rec = _Recorder(body=_SESSION)
        client = _client(rec)
        await client.auth.sign_in("sam@example.com", "secret123")
        rec.body = _USER
        user = await client.auth.get_user()
        assert user.id == "u1"
        await client.close()


class TestBuildRestClient:
    async def test_rest_kind(self):
        config = AppConfig(backend=BackendConfig(kind="rest", url=BASE_URL, api_key=API_KEY))
        client = build_client(config)
        try:
            assert isinstance(client, RestClient)
        finally:
            await client.close()
