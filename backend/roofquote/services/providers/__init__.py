"""Image provider implementations.

Each provider module implements the async generation pattern:
  POST create task → poll status → result URL
"""

from roofquote.services.providers.nano_banana import (
    ImageTask,
    ImageTaskError,
    MalformedSuccessError,
    NanoBananaClient,
    NanoBananaConfig,
    PollTransportError,
    SubmissionError,
    TaskFailedError,
    TaskStatus,
    TaskTimeoutError,
    decode_task,
)

__all__ = [
    "ImageTask",
    "ImageTaskError",
    "MalformedSuccessError",
    "NanoBananaClient",
    "NanoBananaConfig",
    "PollTransportError",
    "SubmissionError",
    "TaskFailedError",
    "TaskStatus",
    "TaskTimeoutError",
    "decode_task",
]
