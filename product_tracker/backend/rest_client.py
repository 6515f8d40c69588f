"""
Hosted backend client over HTTP.

Talks to a backend-as-a-service that exposes:

  - PostgREST-style tables at ``/rest/v1/<table>``
      GET    ?select=*&<col>=eq.<value>&order=<col>.desc&limit=<n>
      POST   body = row,   ``Prefer: return=representation``
      PATCH  ?id=eq.<id>[&user_id=eq.<owner>], body = patch
      DELETE ?id=eq.<id>[&user_id=eq.<owner>]
  - GoTrue-style auth at ``/auth/v1``
      POST /signup, POST /token?grant_type=password, POST /logout, GET /user

Every request carries the project's public key in the ``apikey`` header;
``Authorization`` carries the session's access token once signed in (the
public key before that).

Errors are mapped at this boundary: ``httpx.HTTPStatusError`` and
``httpx.TransportError`` become ``PersistenceError`` for table calls and
``AuthError`` for auth calls.

Credential setup (.env, gitignored)::

  PRODUCT_TRACKER_BACKEND=rest
  PRODUCT_TRACKER_SUPABASE_URL=https://<project>.supabase.co
  PRODUCT_TRACKER_SUPABASE_KEY=<anon key>
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from product_tracker.backend.base import AuthClient, Order, PersistenceClient, Row, owner_filters
from product_tracker.config import BackendConfig
from product_tracker.errors import AuthError, NotFoundError, PersistenceError
from product_tracker.models.profile import AuthSession, AuthUser

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
AUTH_PREFIX = "/auth/v1"


def _filter_value(value: Any) -> str:
    """Render an equality filter in PostgREST operator syntax."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _row_params(row_id: str, owner_id: Optional[str]) -> dict[str, str]:
    return {col: _filter_value(val) for col, val in owner_filters(row_id, owner_id).items()}


def _error_detail(response: httpx.Response) -> str:
    """Pull the most useful message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


def _parse_user(data: Mapping[str, Any]) -> AuthUser:
    return AuthUser(id=data["id"], email=data.get("email", ""), created_at=data.get("created_at"))


class RestAuthClient(AuthClient):
    """GoTrue-style email/password auth sharing the table client's HTTP pool."""

    def __init__(self, http: httpx.AsyncClient, api_key: str) -> None:
        self._http = http
        self._api_key = api_key
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def bearer_token(self) -> str:
        """Access token of the current session, or the public key."""
        return self._session.access_token if self._session else self._api_key

    async def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.bearer_token()}"}
        try:
            response = await self._http.post(f"{AUTH_PREFIX}{path}", headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AuthError(_error_detail(exc.response)) from exc
        except httpx.TransportError as exc:
            raise AuthError(f"Auth service unreachable: {exc}") from exc
        return response

    async def sign_up(self, email: str, password: str) -> AuthUser:
        response = await self._post("/signup", json={"email": email, "password": password})
        data = response.json()
        if "access_token" in data:
            self._session = _parse_session(data)
            return self._session.user
        # Email confirmation pending: no session yet.
        return _parse_user(data.get("user", data))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        self._session = _parse_session(response.json())
        logger.info("Signed in user %s", self._session.user.id)
        return self._session

    async def sign_out(self) -> None:
        if self._session is None:
            return
        try:
            await self._post("/logout")
        finally:
            self._session = None

    async def get_user(self) -> Optional[AuthUser]:
        if self._session is None:
            return None
        try:
            response = await self._http.get(
                f"{AUTH_PREFIX}/user",
                headers={"Authorization": f"Bearer {self._session.access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in (401, 403):
                return None
            raise AuthError(_error_detail(exc.response)) from exc
        except httpx.TransportError as exc:
            raise AuthError(f"Auth service unreachable: {exc}") from exc
        return _parse_user(response.json())


def _parse_session(data: Mapping[str, Any]) -> AuthSession:
    return AuthSession(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        user=_parse_user(data["user"]),
    )


class RestClient(PersistenceClient):
    """``PersistenceClient`` for a hosted PostgREST + GoTrue backend.

    Usage::

        client = RestClient(url="https://xyz.supabase.co", api_key="anon-key")
        rows = await client.select("products", filters={"user_id": uid})
        await client.close()

    Pass ``http_client`` to reuse or mock the transport (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        headers = {"apikey": api_key, "Accept": "application/json"}
        if http_client is None:
            http_client = httpx.AsyncClient(base_url=url, headers=headers, timeout=timeout_seconds)
        else:
            http_client.headers.update(headers)
        self._http = http_client
        self._auth = RestAuthClient(self._http, api_key)

    @classmethod
    def from_config(cls, config: BackendConfig) -> "RestClient":
        return cls(url=config.url, api_key=config.api_key, timeout_seconds=config.timeout_seconds)

    @property
    def auth(self) -> RestAuthClient:
        return self._auth

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
    ) -> list[Row]:
        headers = {
            "Authorization": f"Bearer {self._auth.bearer_token()}",
            "Prefer": "return=representation",
        }
        try:
            response = await self._http.request(
                method, f"{REST_PREFIX}/{table}", params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.error("%s %s failed (%d): %s", method, table, exc.response.status_code, detail)
            raise PersistenceError(f"{method} {table} failed: {detail}", table=table) from exc
        except httpx.TransportError as exc:
            logger.error("%s %s transport error: %s", method, table, exc)
            raise PersistenceError(f"Backend unreachable: {exc}", table=table) from exc

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    async def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        params = {"select": "*"}
        for col, val in (filters or {}).items():
            params[col] = _filter_value(val)
        if order is not None:
            params["order"] = f"{order.column}.{'desc' if order.descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(int(limit))
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        body = {k: v for k, v in row.items() if v is not None}
        rows = await self._request("POST", table, json=body)
        if not rows:
            raise PersistenceError(f"Insert into {table} returned no row.", table=table)
        return rows[0]

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
        owner_id: Optional[str] = None,
    ) -> Row:
        rows = await self._request(
            "PATCH", table, params=_row_params(row_id, owner_id), json=dict(patch)
        )
        if not rows:
            raise NotFoundError(table, row_id)
        return rows[0]

    async def delete(self, table: str, row_id: str, owner_id: Optional[str] = None) -> None:
        rows = await self._request("DELETE", table, params=_row_params(row_id, owner_id))
        if not rows:
            raise NotFoundError(table, row_id)

    async def close(self) -> None:
        await self._http.aclose()
