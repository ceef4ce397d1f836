"""Chat-completion client (OpenAI-compatible) built on httpx."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-5-mini"
SYSTEM_PROMPT = "You are a helpful assistant that answers user questions."

# Returned when the response has no assistant message to extract.
NO_REPLY_TEXT = "Could not parse the response."


class ChatError(Exception):
    """A chat request failed. ``status`` is the HTTP status when known."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` from an OpenAI-style error body."""
    fallback = f"HTTP error: {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return fallback


def _extract_reply(data: object) -> str | None:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content or None


class ChatClient:
    """Sends one prompt per call to a chat-completions endpoint.

    Args:
        base_url: API root; ``/chat/completions`` is appended.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass a MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._timeout = timeout
        self._transport = transport

    async def complete(self, api_key: str, prompt: str, model: str | None = None) -> str:
        """Send ``prompt`` and return the assistant's reply text.

        Raises:
            ChatError: missing key or prompt, HTTP error, network failure,
                or an unparseable response body.
        """
        if not api_key:
            raise ChatError("An API key is required. Enter an API key.")
        if not prompt:
            raise ChatError("The prompt is empty. Enter a question.")

        payload = {
            "model": model or DEFAULT_MODEL,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ChatError(f"Network error: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Chat request failed (%d): %s", response.status_code, message)
            raise ChatError(message, status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ChatError(f"Failed to parse response: {e}") from e

        reply = _extract_reply(data)
        if reply is None:
            logger.warning("Chat response had no message content")
            return NO_REPLY_TEXT
        return reply
