"""
OpenRouter Client — chat completions over a shared httpx.AsyncClient.

One client (and one connection pool) is created in the app lifespan and
shared by every request. Each call is bounded by AI_TIMEOUT_SECONDS.

Failure classification (no retries; the caller decides):

    timeout / network error          → RemoteProviderError
    HTTP 402 Payment Required        → CreditExhaustedError
    any other non-2xx                → RemoteProviderError (upstream message kept)
    2xx with no choices[0] content   → AnalysisParseError
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from documind.core.config import Settings
from documind.core.errors import (
    AnalysisParseError,
    CreditExhaustedError,
    RemoteProviderError,
)

logger = logging.getLogger(__name__)

CREDITS_EXHAUSTED_MESSAGE = (
    "OpenRouter API credit limit reached. Please check your account."
)


def _upstream_message(resp: httpx.Response) -> str:
    """Pull error.message out of an OpenRouter error body, if there is one."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] or resp.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.reason_phrase


class OpenRouterClient:
    """
    Thin async client for POST {base_url}/chat/completions.

    Usage:
        client = OpenRouterClient(settings)
        content = await client.complete(messages, plugins=[...])
        await client.aclose()
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = settings.openrouter_model
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.openrouter_base_url.rstrip("/"),
            timeout=httpx.Timeout(settings.ai_timeout_seconds),
            headers={
                "Authorization": f"Bearer {settings.openrouter_api_key}",
                "Content-Type":  "application/json",
            },
        )

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._http.aclose()

    async def chat_completion(
        self,
        messages: list[dict[str, Any]],
        plugins: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """POST the request and return the decoded JSON body of a 2xx reply."""
        payload: dict[str, Any] = {"model": self._model, "messages": messages}
        if plugins:
            payload["plugins"] = plugins

        t0 = time.monotonic()
        try:
            resp = await self._http.post("/chat/completions", json=payload)
        except httpx.TimeoutException as exc:
            logger.error("AI request timed out | model=%s error=%s", self._model, exc)
            raise RemoteProviderError(
                "The AI provider did not respond in time."
            ) from exc
        except httpx.RequestError as exc:
            logger.error("AI request network error | model=%s error=%s", self._model, exc)
            raise RemoteProviderError(
                f"Could not reach the AI provider: {exc}"
            ) from exc

        elapsed_ms = (time.monotonic() - t0) * 1000

        if resp.status_code == 402:
            logger.error("AI credits exhausted | model=%s", self._model)
            raise CreditExhaustedError(CREDITS_EXHAUSTED_MESSAGE, upstream_status=402)

        if resp.is_error:
            message = _upstream_message(resp)
            logger.error(
                "AI request failed | model=%s status=%d error=%s",
                self._model, resp.status_code, message,
            )
            raise RemoteProviderError(
                f"AI provider error: {message}",
                upstream_status=resp.status_code,
            )

        logger.info(
            "AI request ok | model=%s status=%d elapsed=%.1fms",
            self._model, resp.status_code, elapsed_ms,
        )

        try:
            return resp.json()
        except ValueError as exc:
            raise AnalysisParseError("AI provider returned a non-JSON body.") from exc

    async def complete(
        self,
        messages: list[dict[str, Any]],
        plugins: list[dict[str, Any]] | None = None,
    ) -> str:
        """Return choices[0].message.content as a string."""
        body = await self.chat_completion(messages, plugins=plugins)
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AnalysisParseError("AI response contained no message content.") from exc
        if not isinstance(content, str) or not content.strip():
            raise AnalysisParseError("AI response contained no message content.")
        return content
