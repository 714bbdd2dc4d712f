"""Upload storage, downloads and small formatting helpers for quotes."""

from __future__ import annotations

import logging
import os
import re
import time
import uuid
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

import httpx
from fastapi import UploadFile

logger = logging.getLogger(__name__)

DUTCH_MONTHS = (
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/"\x00-\x1f\x7f]')


class DownloadError(RuntimeError):
    """Raised when a remote file cannot be fetched."""


def now_ms() -> int:
    return int(time.time() * 1000)


def upload_filename(original: str, stamp_ms: int | None = None) -> str:
    """Return ``<base>-<epoch ms><ext>`` with whitespace in the base replaced by ``_``."""
    path = Path(original or "upload")
    base = re.sub(r"\s+", "_", path.stem) or "upload"
    return f"{base}-{stamp_ms if stamp_ms is not None else now_ms()}{path.suffix}"


async def save_upload(upload: UploadFile, directory: str | Path) -> Path:
    """Persist an uploaded file into ``directory`` and return its path."""
    dir_path = Path(directory)
    dir_path.mkdir(parents=True, exist_ok=True)

    dest = dir_path / upload_filename(upload.filename or "upload")
    data = await upload.read()
    dest.write_bytes(data)
    logger.info("Upload saved: %s (%d bytes)", dest, len(data))
    return dest


async def download_file(url: str, dest: str | Path, client: httpx.AsyncClient) -> Path:
    """Download ``url`` into ``dest``."""
    response = await client.get(url, follow_redirects=True)
    if not response.is_success:
        raise DownloadError(f"Download failed: {response.status_code} {response.reason_phrase}")

    dest_path = Path(dest)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = dest_path.with_name(f".{dest_path.name}.{uuid.uuid4().hex}.part")
    tmp_path.write_bytes(response.content)
    os.replace(tmp_path, dest_path)
    logger.info("Downloaded %s → %s (%d bytes)", url, dest_path, len(response.content))
    return dest_path


def public_upload_url(base_url: str, path: str | Path) -> str:
    """URL under which the /uploads static mount serves ``path``."""
    return f"{base_url.rstrip('/')}/uploads/{quote(Path(path).name)}"


def format_dutch_date(dt: datetime) -> str:
    """e.g. ``19 oktober 2026``."""
    return f"{dt.day} {DUTCH_MONTHS[dt.month - 1]} {dt.year}"


def default_quote_id(dt: datetime) -> str:
    return f"Q-{dt:%Y%m%d-%H%M%S}"


def safe_file_name(name: str, fallback: str = "quote") -> str:
    """Make ``name`` usable as a single file name inside one directory.

    Path separators, double quotes and control characters become ``_`` and
    ``..`` sequences are collapsed, so the result never leaves its directory.
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name or "").strip()
    while ".." in cleaned:
        cleaned = cleaned.replace("..", "_")
    cleaned = cleaned.lstrip(".").strip()
    return cleaned or fallback
