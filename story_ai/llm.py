"""LLM client: HTTP connection to a text-completion backend.

The pipeline injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` identifies which pipeline step is calling ("narrator" for story
turns, "json_repair" for the repair loop). Implementations may use it for
logging or routing; the simplest implementation ignores it.

Two implementations are provided:

    HttpLLM  : real HTTP client for KoboldCpp, OpenAI-compatible and Gemini
                 backends. Selected by provider_format.
    EchoLLM  : returns the prompt back unchanged. Useful for smoke-testing
                 the wiring without a running model.

app.build_llm picks one from Settings (LLM_PROVIDER_FORMAT=echo for EchoLLM).
Tests use StubLLM (defined in conftest.py) instead.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["koboldcpp", "openai", "gemini"]


class HttpLLM:
    """Async HTTP client for text-completion backends.

    Supported formats:
      "koboldcpp" : POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
      "openai"    : POST /v1/completions   {"model": ..., "prompt": ...}
                     Response: {"choices": [{"text": "..."}]}
      "gemini"    : POST /v1beta/models/{model}:generateContent
                     {"contents": [{"parts": [{"text": ...}]}]}
                     Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}

    An empty completion is reported as an error: a blocked or filtered
    generation is useless to every caller.

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:5001".
        api_key:         Bearer token (query key for gemini), or empty string.
        provider_format: Wire format to use. Defaults to "koboldcpp".
        model:           Model identifier, used by the openai and gemini formats.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key and self._format != "gemini":
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict, dict[str, str]]:
        """Return (url, body, query params) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/completions"
            body: dict = {"prompt": prompt}
            if self._model:
                body["model"] = self._model
            return url, body, {}

        if self._format == "gemini":
            url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
            body = {"contents": [{"parts": [{"text": prompt}]}]}
            params = {"key": self._api_key} if self._api_key else {}
            return url, body, params

        # koboldcpp (default)
        url = f"{self._base_url}/api/v1/generate"
        return url, {"prompt": prompt}, {}

    def _parse_response(self, data: object) -> str:
        """Extract the completion text from the response body."""
        if self._format == "openai":
            try:
                text = data["choices"][0]["text"]
            except (TypeError, IndexError, KeyError) as e:
                raise LLMError("Unexpected response format from OpenAI-compatible backend") from e
        elif self._format == "gemini":
            try:
                parts = data["candidates"][0]["content"]["parts"]
                text = "".join(p.get("text", "") for p in parts)
            except (TypeError, IndexError, KeyError, AttributeError) as e:
                raise LLMError("Unexpected response format from Gemini backend") from e
        else:
            # koboldcpp
            try:
                text = data["results"][0]["text"]
            except (TypeError, IndexError, KeyError) as e:
                raise LLMError("Unexpected response format from KoboldCpp backend") from e

        if not isinstance(text, str):
            raise LLMError("LLM backend returned a non-text completion")
        return text

    async def __call__(self, stage: str, prompt: str) -> str:
        url, body, params = self._build_request(prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers(), params=params)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM backend request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a body that is not JSON") from e

        text = self._parse_response(data)
        if not text.strip():
            raise LLMError("LLM backend returned an empty completion")
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM: returns the prompt unchanged; useful for wiring smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the prompt text as-is. No network calls.

    The output is never a valid turn response, so every story turn driven by
    EchoLLM ends as a failed turn after the repair loop. That makes it handy
    for exercising the failure path end-to-end.
    """

    async def __call__(self, stage: str, prompt: str) -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


# ---------------------------------------------------------------------------
# LLMError: raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
