from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from kairos.errors import CompletionAPIError, CompletionError, ConfigurationError
from kairos.prompt import UNKNOWN_API_ERROR, build_messages


logger = logging.getLogger("kairos.completion")


def _extract_content(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str) or not content:
        return None
    return content


def _extract_error_message(data: Any) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return UNKNOWN_API_ERROR


class CompletionClient:
    """Single-shot client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.Client,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        api_url: str = "https://api.openai.com/v1/chat/completions",
    ) -> None:
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        self._api_key = api_key
        self._http = http_client
        self.model = model
        self.temperature = temperature
        self.api_url = api_url

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.Client) -> "CompletionClient":
        return cls(
            api_key=settings.openai_api_key or "",
            http_client=http_client,
            model=settings.openai_model,
            temperature=settings.temperature,
            api_url=settings.openai_api_url,
        )

    def build_payload(self, question: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": build_messages(question),
            "temperature": self.temperature,
        }

    def complete(self, question: str) -> Optional[str]:
        """Ask ``question`` and return the first choice's content.

        Returns ``None`` when a successful response carries no usable content.
        Raises :class:`CompletionAPIError` on a non-success status and
        :class:`CompletionError` when the endpoint is unreachable or the body
        is not JSON.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            response = self._http.post(
                self.api_url, json=self.build_payload(question), headers=headers
            )
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion API call failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionError(
                f"Completion API returned a non-JSON body (status {response.status_code})"
            ) from exc

        if not response.is_success:
            logger.error("Completion API error: status=%s body=%s", response.status_code, data)
            raise CompletionAPIError(_extract_error_message(data), response.status_code)

        content = _extract_content(data)
        logger.info(
            "Completion received: model=%s status=%s chars=%s",
            self.model,
            response.status_code,
            len(content or ""),
        )
        return content
