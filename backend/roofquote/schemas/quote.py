"""Pydantic v2 schemas for quote generation."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class QuoteMeta(BaseModel):
    """Header fields printed on the quote."""

    quote_id: str
    date: str
    client_name: str = ""
    site_address: str = ""


class QuoteRequest(BaseModel):
    """Everything the pipeline needs once uploads are stored on disk."""

    description: str
    before_path: Path
    after_path: Path | None = None
    client_name: str = ""
    site_address: str = ""
    quote_id: str | None = None
    generate_after: bool = True


class QuoteDocument(BaseModel):
    """A rendered quote, ready to stream or write to disk."""

    quote_id: str
    file_name: str
    pdf_bytes: bytes
    bullets: list[str]
    after_generated: bool = False


class QuoteFileResponse(BaseModel):
    """Response body for ``response=file`` mode."""

    ok: bool = True
    fileName: str
    pdfPath: str
    url: str
    responseMode: str = "file"
