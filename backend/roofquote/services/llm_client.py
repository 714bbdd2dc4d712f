"""Unified LLM client with retry + exponential backoff, timeout handling,
and structured error messages.

All LLM calls across the codebase should go through `llm_call()`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from roofquote.config import get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared HTTP client (lazy init)
# ---------------------------------------------------------------------------

_http_client: httpx.AsyncClient | None = None


def _get_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(timeout=float(get_settings().LLM_TIMEOUT))
    return _http_client


async def close_client() -> None:
    """Close the shared client (called on application shutdown)."""
    global _http_client
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
    _http_client = None


def mask_key(key: str) -> str:
    """Mask an API key for safe logging: show first 8 and last 4 chars."""
    if len(key) <= 16:
        return "***"
    return f"{key[:8]}...{key[-4:]}"


# ---------------------------------------------------------------------------
# Retriable status codes
# ---------------------------------------------------------------------------

_RETRIABLE_STATUS = {408, 429, 500, 502, 503, 504}

_sleep = asyncio.sleep


# ---------------------------------------------------------------------------
# Core LLM call
# ---------------------------------------------------------------------------

async def llm_call(
    system_prompt: str,
    user_content: str | list[dict[str, Any]],
    *,
    model: str | None = None,
    max_tokens: int = 1024,
    temperature: float = 0.7,
    caller: str = "unknown",
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """Chat-completion call with retry + exponential backoff.

    Args:
        system_prompt: System message.
        user_content: User message, either plain text or a list of content parts.
        model: Override the default LLM_MODEL.
        max_tokens: Max tokens in response.
        temperature: Sampling temperature.
        caller: Identifier for logging.
        http_client: Optional client, mainly for tests.

    Returns:
        The content string from the LLM response.

    Raises:
        LLMError: On a non-retriable error or when all retries are exhausted.
    """
    settings = get_settings()
    api_key = settings.OPENAI_API_KEY
    if not api_key:
        raise LLMError("OPENAI_API_KEY is not configured", retriable=False)

    model = model or settings.LLM_MODEL
    max_retries = max(settings.LLM_MAX_RETRIES, 1)
    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    body: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    last_error: Exception | None = None

    for attempt in range(1, max_retries + 1):
        logger.info(
            "[%s] LLM call attempt %d/%d model=%s key=%s",
            caller, attempt, max_retries, model, mask_key(api_key),
        )

        try:
            client = http_client or _get_client()
            response = await client.post(url, headers=headers, json=body)

            if response.status_code in _RETRIABLE_STATUS:
                backoff = min(2 ** attempt, 30)
                logger.warning(
                    "[%s] HTTP %d (retriable), backing off %ds...",
                    caller, response.status_code, backoff,
                )
                last_error = LLMError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    retriable=True,
                )
                if attempt < max_retries:
                    await _sleep(backoff)
                continue

            response.raise_for_status()

            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
            logger.info("[%s] LLM response OK, length=%d", caller, len(content))
            return content

        except httpx.TimeoutException:
            backoff = min(2 ** attempt, 30)
            logger.warning(
                "[%s] Timeout on attempt %d, backing off %ds...",
                caller, attempt, backoff,
            )
            last_error = LLMError(
                f"LLM call timed out after {settings.LLM_TIMEOUT}s",
                status_code=408,
                retriable=True,
            )
            if attempt < max_retries:
                await _sleep(backoff)
            continue

        except httpx.HTTPStatusError as e:
            logger.error("[%s] HTTP error %d: %s", caller, e.response.status_code, e)
            raise LLMError(
                f"LLM HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
                retriable=False,
            ) from e

        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMError(f"LLM returned an unexpected payload: {e}", retriable=False) from e

    raise last_error or LLMError("All LLM retry attempts exhausted", retriable=False)


# ---------------------------------------------------------------------------
# Custom exception
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """Structured LLM error with status code and retriable flag."""

    def __init__(self, message: str, status_code: int = 0, retriable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retriable = retriable
