"""Hosted backend adapters speaking the Supabase REST (PostgREST) and auth APIs.

Row-level access control is enforced by the backend; these classes only
forward the caller's access token and translate rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import httpx

from ...clock import isoformat_z, utc_now
from ...errors import AuthError, StorageError
from ...logging_config import get_logger
from ...models.note import Note
from ...models.transaction import NewTransaction, Transaction
from .transaction import new_record_id

logger = get_logger("infra.supabase")

# Every row is newer than the epoch; PostgREST refuses unfiltered deletes.
_EVERY_ROW = {"created_at": "gt.1970-01-01"}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, Mapping):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


def _jsonable(row: Mapping[str, Any]) -> dict[str, Any]:
    return {k: isoformat_z(v) if isinstance(v, datetime) else v for k, v in row.items()}


class SupabaseClient:
    """Thin wrapper over ``httpx.Client`` that adds the project key and bearer token."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        http: httpx.Client | None = None,
        access_token: str | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._http = http or httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"apikey": api_key},
        )

    def authorized(self, access_token: str | None) -> SupabaseClient:
        """Return a client sharing this connection pool but acting as ``access_token``."""

        return SupabaseClient(
            self.base_url, self.api_key, http=self._http, access_token=access_token
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        bearer: str | None = None,
    ) -> httpx.Response:
        token = bearer or self.access_token or self.api_key
        merged = {"Authorization": f"Bearer {token}", **(headers or {})}
        try:
            return self._http.request(method, path, params=params, json=json, headers=merged)
        except httpx.HTTPError as exc:
            logger.error("Backend unreachable", extra={"method": method, "path": path, "error": str(exc)})
            raise StorageError("The backend could not be reached.") from exc

    def rest(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        response = self.request(method, f"/rest/v1/{table}", params=params, json=json, headers=headers)
        if response.is_error:
            message = _error_message(response)
            logger.error(
                "Backend rejected request",
                extra={"method": method, "table": table, "status": response.status_code, "detail": message},
            )
            raise StorageError(f"The backend rejected the request: {message}")
        return response

    def close(self) -> None:
        self._http.close()


class SupabaseTransactionRepository:
    """Transactions stored in the hosted ``transactions`` table."""

    TABLE = "transactions"

    def __init__(
        self,
        client: SupabaseClient,
        *,
        id_factory: Callable[[], str] = new_record_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self._id_factory = id_factory
        self._clock = clock

    def list_transactions(self) -> list[Transaction]:
        response = self.client.rest(
            "GET", self.TABLE, params={"select": "*", "order": "created_at.desc"}
        )
        return [Transaction.from_row(row) for row in response.json()]

    def create_transaction(self, new: NewTransaction) -> None:
        row = new.to_row(transaction_id=self._id_factory(), created_at=self._clock())
        self.client.rest("POST", self.TABLE, json=_jsonable(row), prefer="return=minimal")

    def delete_transaction(self, transaction_id: str) -> None:
        self.client.rest("DELETE", self.TABLE, params={"id": f"eq.{transaction_id}"})

    def clear_all_transactions(self) -> None:
        self.client.rest("DELETE", self.TABLE, params=_EVERY_ROW)


class SupabaseNoteRepository:
    TABLE = "notes"

    def __init__(
        self,
        client: SupabaseClient,
        *,
        id_factory: Callable[[], str] = new_record_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self._id_factory = id_factory
        self._clock = clock

    def list_notes(self) -> list[Note]:
        response = self.client.rest(
            "GET", self.TABLE, params={"select": "*", "order": "created_at.desc"}
        )
        return [Note.from_row(row) for row in response.json()]

    def create_note(self, text: str) -> None:
        row = {"id": self._id_factory(), "text": text, "created_at": self._clock()}
        self.client.rest("POST", self.TABLE, json=_jsonable(row), prefer="return=minimal")

    def delete_note(self, note_id: str) -> None:
        self.client.rest("DELETE", self.TABLE, params={"id": f"eq.{note_id}"})


@dataclass(frozen=True)
class BackendUser:
    user_id: str
    access_token: str


class SupabaseAuthBackend:
    """Password sign-in, session probing and profile role lookup."""

    PROFILE_TABLE = "profiles"

    def __init__(self, client: SupabaseClient):
        self.client = client

    def sign_in(self, login: str, password: str) -> BackendUser:
        response = self.client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": login, "password": password},
        )
        if response.is_error:
            raise AuthError(f"Backend sign-in failed: {_error_message(response)}")
        body = response.json()
        try:
            return BackendUser(user_id=str(body["user"]["id"]), access_token=str(body["access_token"]))
        except (KeyError, TypeError) as exc:
            raise AuthError("Backend sign-in returned an unexpected response.") from exc

    def active_user_id(self, access_token: str) -> Optional[str]:
        """Return the signed-in user id, or ``None`` when the backend reports no session."""

        response = self.client.request("GET", "/auth/v1/user", bearer=access_token)
        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise StorageError(f"Session check failed: {_error_message(response)}")
        return str(response.json().get("id") or "") or None

    def sign_out(self, access_token: str) -> None:
        response = self.client.request("POST", "/auth/v1/logout", bearer=access_token)
        if response.is_error and response.status_code not in (401, 403):
            raise StorageError(f"Sign-out failed: {_error_message(response)}")

    def profile_role(self, user_id: str, access_token: str) -> Optional[str]:
        """Role stored in the user's profile row, if any."""

        client = self.client.authorized(access_token)
        response = client.rest(
            "GET", self.PROFILE_TABLE, params={"select": "role", "id": f"eq.{user_id}"}
        )
        rows = response.json()
        if rows and rows[0].get("role"):
            return str(rows[0]["role"])
        return None


__all__ = [
    "BackendUser",
    "SupabaseAuthBackend",
    "SupabaseClient",
    "SupabaseNoteRepository",
    "SupabaseTransactionRepository",
]
