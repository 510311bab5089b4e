import json
from typing import Optional

import httpx
from loguru import logger


class SuggestionError(Exception):
    """The suggestion service could not produce an answer; the message is user-facing."""


class SuggestionClient:
    def __init__(self, url: str, *, timeout: float = 60.0, transport: Optional[httpx.BaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def fetch(self, question: str) -> str:
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json={"question": question})
        except httpx.HTTPError as exc:
            logger.error(f"Suggestion request to {self.url} failed: {exc}")
            raise SuggestionError(f"Could not reach AI service: {exc}") from exc

        try:
            data = json.loads(response.text)
        except ValueError as exc:
            logger.error(f"JSON parse error from AI service: {exc} | body={response.text[:500]!r}")
            raise SuggestionError("Invalid response from AI service") from exc

        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            message = data.get("error")
            if not isinstance(message, str) or not message.strip():
                message = f"HTTP error! status: {response.status_code}"
            raise SuggestionError(message)

        suggestion = data.get("suggestion")
        if not isinstance(suggestion, str) or not suggestion.strip():
            raise SuggestionError("No suggestion received from AI service")
        return suggestion
