"""NanoBanana image editing provider.

Implements the async generation pattern used by the image API:
  POST create task → poll record-info → result image URL

The client never reads global settings; build a ``NanoBananaConfig`` and
inject it so tests can point the client at a mock transport.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.nanobananaapi.ai/api/v1/nanobanana"

# successFlag values reported by record-info
_FLAG_SUCCEEDED = 1
_FLAGS_FAILED = (2, 3)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ImageTaskError(Exception):
    """Base class for image task failures. ``kind`` is stable for callers."""

    kind = "image_task"

    def __init__(self, message: str, *, task_id: str | None = None):
        super().__init__(message)
        self.task_id = task_id


class SubmissionError(ImageTaskError):
    """The create-task request failed or returned an unexpected payload."""

    kind = "submission"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TaskFailedError(ImageTaskError):
    """The remote service reported the task as failed.

    ``flag`` keeps the raw successFlag (2 or 3); the two values are not
    distinguished yet.
    """

    kind = "task_failed"

    def __init__(self, message: str, *, task_id: str | None = None, flag: int | None = None):
        super().__init__(message, task_id=task_id)
        self.flag = flag


class MalformedSuccessError(ImageTaskError):
    """The task reported success without a result image URL."""

    kind = "malformed_success"

    def __init__(self, message: str, *, task_id: str | None = None, payload: Any = None):
        super().__init__(message, task_id=task_id)
        self.payload = payload


class PollTransportError(ImageTaskError):
    """A single status query could not complete; the polling cycle is aborted."""

    kind = "poll_transport"

    def __init__(self, message: str, *, task_id: str | None = None, status_code: int | None = None):
        super().__init__(message, task_id=task_id)
        self.status_code = status_code


class TaskTimeoutError(ImageTaskError, TimeoutError):
    """The polling budget ran out while the task was still pending."""

    kind = "timeout"

    def __init__(self, message: str, *, task_id: str | None = None, attempts: int = 0):
        super().__init__(message, task_id=task_id)
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Task status
# ---------------------------------------------------------------------------

class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


@dataclass(frozen=True)
class ImageTask:
    """One decoded record-info snapshot."""
    task_id: str
    status: TaskStatus
    flag: Any = None
    result_url: str | None = None
    error_detail: str | None = None


def decode_task(task_id: str, payload: Any) -> ImageTask:
    """Decode a record-info envelope into exactly one status.

    Only the integers 1, 2 and 3 are terminal. Anything else, including a
    missing ``data`` block, booleans and numeric strings, stays pending.
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        return ImageTask(task_id=task_id, status=TaskStatus.PENDING)

    flag = data.get("successFlag")
    is_int_flag = isinstance(flag, int) and not isinstance(flag, bool)

    if is_int_flag and flag == _FLAG_SUCCEEDED:
        response = data.get("response")
        result_url = response.get("resultImageUrl") if isinstance(response, dict) else None
        return ImageTask(
            task_id=task_id,
            status=TaskStatus.SUCCEEDED,
            flag=flag,
            result_url=result_url if isinstance(result_url, str) and result_url.strip() else None,
        )

    if is_int_flag and flag in _FLAGS_FAILED:
        return ImageTask(
            task_id=task_id,
            status=TaskStatus.FAILED,
            flag=flag,
            error_detail=data.get("errorMessage") or "generation failed",
        )

    return ImageTask(task_id=task_id, status=TaskStatus.PENDING, flag=flag)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

@dataclass
class NanoBananaConfig:
    """Connection settings for the NanoBanana API."""
    api_key: str
    base_url: str = _DEFAULT_BASE_URL
    callback_url: str = "https://example.com/callback"
    request_timeout: float = 30.0
    poll_timeout_ms: int = 120_000
    poll_interval_ms: int = 2_500

    @classmethod
    def from_settings(cls, settings: Any) -> "NanoBananaConfig":
        return cls(
            api_key=settings.NANO_BANANA_API_KEY,
            base_url=settings.NANO_BANANA_BASE_URL or _DEFAULT_BASE_URL,
            callback_url=settings.NANO_CALLBACK_URL,
            request_timeout=settings.NANO_REQUEST_TIMEOUT,
            poll_timeout_ms=settings.NANO_POLL_TIMEOUT_MS,
            poll_interval_ms=settings.NANO_POLL_INTERVAL_MS,
        )

    @property
    def generate_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/generate"

    @property
    def record_info_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/record-info"


class NanoBananaClient:
    """Submit image-to-image edits and poll them to completion.

    Holds no per-task state, so one client can serve concurrent requests.
    ``sleep`` and ``clock`` are injectable for tests.
    """

    def __init__(
        self,
        config: NanoBananaConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self._client = http_client or httpx.AsyncClient(timeout=config.request_timeout)
        self._own_client = http_client is None
        self._sleep = sleep
        self._clock = clock

    async def __aenter__(self) -> "NanoBananaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def submit(
        self,
        prompt: str,
        image_url: str,
        *,
        image_size: str = "4:3",
        num_images: int = 1,
    ) -> str:
        """Start one image-to-image task and return its taskId.

        Exactly one request is sent; every submission is billable.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must not be empty")
        if not image_url.startswith(("http://", "https://")):
            raise ValueError(f"image_url must be a public http(s) URL, got {image_url!r}")
        if num_images < 1:
            raise ValueError("num_images must be a positive integer")

        body = {
            "prompt": prompt,
            "type": "IMAGETOIMAGE",
            "imageUrls": [image_url],
            "numImages": num_images,
            "image_size": image_size,
            "callBackUrl": self.config.callback_url,
        }

        try:
            resp = await self._client.post(
                self.config.generate_url,
                json=body,
                headers={**self._headers, "Content-Type": "application/json"},
                timeout=self.config.request_timeout,
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f"NanoBanana submit failed: {e}") from e

        if not resp.is_success:
            raise SubmissionError(
                f"NanoBanana submit failed: {resp.status_code} {resp.reason_phrase}: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            result = resp.json()
        except ValueError as e:
            raise SubmissionError(
                f"NanoBanana submit returned invalid JSON: {resp.text[:200]}",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        data = result.get("data") if isinstance(result, dict) else None
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not isinstance(result, dict) or result.get("code") != 200 or not task_id:
            raise SubmissionError(
                f"NanoBanana unexpected response: {result}",
                status_code=resp.status_code,
                body=result,
            )

        logger.info("NanoBanana task submitted: %s (size=%s, n=%d)", task_id, image_size, num_images)
        return str(task_id)

    async def fetch_status(self, task_id: str) -> ImageTask:
        """Run a single record-info query."""
        try:
            resp = await self._client.get(
                self.config.record_info_url,
                params={"taskId": task_id},
                headers=self._headers,
                timeout=self.config.request_timeout,
            )
        except httpx.HTTPError as e:
            raise PollTransportError(f"NanoBanana poll failed: {e}", task_id=task_id) from e

        if not resp.is_success:
            raise PollTransportError(
                f"NanoBanana poll failed: {resp.status_code} {resp.reason_phrase}",
                task_id=task_id,
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise PollTransportError(
                f"NanoBanana poll returned invalid JSON: {resp.text[:200]}",
                task_id=task_id,
                status_code=resp.status_code,
            ) from e

        return decode_task(task_id, payload)

    async def poll(
        self,
        task_id: str,
        *,
        timeout_ms: int | None = None,
        interval_ms: int | None = None,
    ) -> str:
        """Poll ``task_id`` until it succeeds, fails or the budget runs out.

        Returns the result image URL. The deadline is checked before every
        attempt, so the cycle can overrun by one interval plus one request.
        Transport failures abort the cycle on the first occurrence.
        """
        timeout_ms = self.config.poll_timeout_ms if timeout_ms is None else timeout_ms
        interval_ms = self.config.poll_interval_ms if interval_ms is None else interval_ms
        deadline = self._clock() + timeout_ms / 1000
        attempts = 0

        while self._clock() < deadline:
            attempts += 1
            task = await self.fetch_status(task_id)

            if task.status is TaskStatus.SUCCEEDED:
                if not task.result_url:
                    raise MalformedSuccessError(
                        "NanoBanana: success but no resultImageUrl",
                        task_id=task_id,
                    )
                logger.info("NanoBanana task %s succeeded after %d poll(s)", task_id, attempts)
                return task.result_url

            if task.status is TaskStatus.FAILED:
                raise TaskFailedError(
                    f"NanoBanana task failed: {task.error_detail}",
                    task_id=task_id,
                    flag=task.flag,
                )

            logger.debug("NanoBanana task %s pending (flag=%r, attempt=%d)", task_id, task.flag, attempts)
            await self._sleep(interval_ms / 1000)

        raise TaskTimeoutError(
            f"NanoBanana task polling timed out after {timeout_ms}ms",
            task_id=task_id,
            attempts=attempts,
        )
