from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..config import settings

logger = logging.getLogger("rag.llm")


class CompletionError(RuntimeError):
    """Raised when the chat completion call fails or returns no content."""


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.completion_model
        self.max_tokens = max_tokens or settings.completion_max_tokens
        self.temperature = settings.completion_temperature if temperature is None else temperature
        self.url = (base_url or settings.openai_base_url).rstrip("/") + "/chat/completions"
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run a single-turn chat completion and return the assistant text.

        Raises CompletionError on transport failure, HTTP error status, or
        a response without message content.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Completion request failed (%s): %s", type(exc).__name__, exc)
            raise CompletionError(
                f"Completion request failed: {type(exc).__name__}"
            ) from exc

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise CompletionError("Malformed completion response.") from exc

        if not content or not content.strip():
            raise CompletionError("Completion response contained no content.")

        return content
