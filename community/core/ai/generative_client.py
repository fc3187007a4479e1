"""Gemini ``generateContent`` client for structured JSON output."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-3-flash-preview"
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


class GenerativeServiceError(Exception):
    """Base exception for generative text calls.

    ``code`` is one of ``missing_api_key``, ``request_failed`` or
    ``malformed_response``.
    """

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        super().__init__(message or code)
        self.code = code


class GeminiClient:
    """Sends a prompt plus a response schema and returns the parsed JSON object."""

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        api_key_env: Iterable[str] = API_KEY_ENV_VARS,
    ) -> None:
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.api_key_env = tuple(api_key_env)

    def _api_key(self) -> str:
        # Read on every call so a key added after startup is picked up.
        for name in self.api_key_env:
            value = os.environ.get(name)
            if value:
                return value
        return ""

    def generate_json(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ask the model for a JSON object matching ``schema``.

        Args:
            prompt: Natural-language instruction
            schema: Gemini response schema (OpenAPI subset)

        Returns:
            The decoded JSON object

        Raises:
            GenerativeServiceError: On missing key, transport failure, or a
                response that is not a JSON object
        """
        api_key = self._api_key()
        if not api_key:
            raise GenerativeServiceError("missing_api_key", "No generative API key configured")

        url = f"{self.api_base}/models/{self.model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        try:
            resp = requests.post(
                url,
                json=body,
                headers={"x-goog-api-key": api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Generative request failed: {e}")
            raise GenerativeServiceError("request_failed", f"Generative request failed: {e}") from e
        try:
            data = resp.json()
        except ValueError as e:
            # requests' JSONDecodeError is also a RequestException.
            raise GenerativeServiceError("malformed_response", "Response body is not JSON") from e

        text = _response_text(data)
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise GenerativeServiceError("malformed_response", "Model output is not JSON") from e
        if not isinstance(payload, dict):
            raise GenerativeServiceError("malformed_response", "Model output is not a JSON object")
        return payload


def _response_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    except (KeyError, IndexError, TypeError) as e:
        raise GenerativeServiceError("malformed_response", "Response has no candidate text") from e
    if not text.strip():
        raise GenerativeServiceError("malformed_response", "Response has no candidate text")
    return text


__all__ = ["GeminiClient", "GenerativeServiceError"]
