from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from config.settings import Settings
from kairos.errors import ConfigurationError, StorageError
from kairos.models import LearnRequest, User


logger = logging.getLogger("kairos.storage")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)[:300]


class SupabaseStore:
    """Identity lookup and learn_requests rows over Supabase's REST API.

    Requests carry the project key in ``apikey`` and the signed-in user's
    access token as the bearer, so row-level security applies to the user.
    Without a token the project key is used as the bearer.
    """

    def __init__(
        self,
        url: str,
        key: str,
        http_client: httpx.Client,
        table: str = "learn_requests",
    ) -> None:
        if not url or not key:
            raise ConfigurationError("SUPABASE_URL or SUPABASE_KEY not configured")
        self.url = url.rstrip("/")
        self._key = key
        self._http = http_client
        self.table = table

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.Client) -> "SupabaseStore":
        return cls(
            url=settings.supabase_url or "",
            key=settings.supabase_key or "",
            http_client=http_client,
            table=settings.learn_table,
        )

    @property
    def rest_endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table}"

    def _headers(self, access_token: Optional[str], prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._key,
            "Authorization": f"Bearer {access_token or self._key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._http.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise StorageError(f"Supabase {method} {url} failed: {exc}") from exc

    def _rows(self, response: httpx.Response, action: str) -> List[LearnRequest]:
        if not response.is_success:
            raise StorageError(
                f"Supabase {action} failed ({response.status_code}): {_error_detail(response)}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise StorageError(f"Supabase {action} returned a non-JSON body") from exc
        if isinstance(body, dict):
            body = [body]
        if not isinstance(body, list):
            raise StorageError(f"Supabase {action} returned an unexpected body: {body!r}")
        try:
            return [LearnRequest.model_validate(row) for row in body]
        except ValidationError as exc:
            raise StorageError(f"Supabase {action} returned an unexpected row: {exc}") from exc

    def get_user(self, access_token: Optional[str]) -> Optional[User]:
        """Return the user owning ``access_token``, or ``None`` for guests."""
        if not access_token:
            return None
        response = self._send(
            "GET", f"{self.url}/auth/v1/user", headers=self._headers(access_token)
        )
        if response.status_code in (401, 403):
            logger.info("Supabase rejected the access token (%s)", response.status_code)
            return None
        if not response.is_success:
            raise StorageError(
                f"Supabase user lookup failed ({response.status_code}): {_error_detail(response)}"
            )
        try:
            return User.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StorageError(f"Supabase user lookup returned an unexpected body: {exc}") from exc

    def insert_request(
        self, user_id: str, input_text: str, access_token: Optional[str] = None
    ) -> LearnRequest:
        response = self._send(
            "POST",
            self.rest_endpoint,
            json=[{"user_id": user_id, "input_text": input_text}],
            headers=self._headers(access_token, prefer="return=representation"),
        )
        rows = self._rows(response, "insert")
        if not rows:
            raise StorageError("Supabase insert returned no rows")
        return rows[0]

    def update_response(
        self,
        row_id: Union[int, str],
        openai_response: str,
        access_token: Optional[str] = None,
    ) -> List[LearnRequest]:
        response = self._send(
            "PATCH",
            self.rest_endpoint,
            params={"id": f"eq.{row_id}"},
            json={"openai_response": openai_response},
            headers=self._headers(access_token, prefer="return=representation"),
        )
        return self._rows(response, "update")
