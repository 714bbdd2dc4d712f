"""Pydantic v2 schemas package."""

from roofquote.schemas.quote import (
    QuoteDocument,
    QuoteFileResponse,
    QuoteMeta,
    QuoteRequest,
)

__all__ = [
    "QuoteDocument",
    "QuoteFileResponse",
    "QuoteMeta",
    "QuoteRequest",
]
