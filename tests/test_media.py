"""Upload storage, downloads and formatting helpers."""
import io
from datetime import datetime

import httpx
import pytest
from fastapi import UploadFile

from roofquote.services.company import fetch_logo
from roofquote.services.media import (
    DownloadError,
    default_quote_id,
    download_file,
    format_dutch_date,
    public_upload_url,
    safe_file_name,
    save_upload,
    upload_filename,
)


def test_upload_filename_replaces_whitespace():
    assert upload_filename("mijn dak  foto.JPG", stamp_ms=1700000000000) == "mijn_dak_foto-1700000000000.JPG"
    assert upload_filename("", stamp_ms=1) == "upload-1"


@pytest.mark.asyncio
async def test_save_upload_writes_file(tmp_path):
    upload = UploadFile(file=io.BytesIO(b"jpegdata"), filename="voor foto.jpg")
    path = await save_upload(upload, tmp_path / "uploads")

    assert path.parent == tmp_path / "uploads"
    assert path.name.startswith("voor_foto-")
    assert path.suffix == ".jpg"
    assert path.read_bytes() == b"jpegdata"


@pytest.mark.asyncio
async def test_download_file(tmp_path):
    transport = httpx.MockTransport(lambda r: httpx.Response(200, content=b"img"))
    async with httpx.AsyncClient(transport=transport) as http:
        dest = await download_file("https://cdn.test/after.jpg", tmp_path / "a" / "after.jpg", http)

    assert dest.read_bytes() == b"img"


@pytest.mark.asyncio
async def test_download_file_error(tmp_path):
    transport = httpx.MockTransport(lambda r: httpx.Response(404))
    async with httpx.AsyncClient(transport=transport) as http:
        with pytest.raises(DownloadError):
            await download_file("https://cdn.test/missing.jpg", tmp_path / "x.jpg", http)


@pytest.mark.asyncio
async def test_fetch_logo_failure_is_not_fatal(tmp_path):
    transport = httpx.MockTransport(lambda r: httpx.Response(500))
    async with httpx.AsyncClient(transport=transport) as http:
        assert await fetch_logo("https://cdn.test/logo.png", tmp_path, http) is None
        assert await fetch_logo("", tmp_path, http) is None


def test_public_upload_url():
    assert public_upload_url("https://quotes.test/", "/srv/uploads/dak foto-1.jpg") == (
        "https://quotes.test/uploads/dak%20foto-1.jpg"
    )


def test_dutch_date_and_quote_id():
    dt = datetime(2026, 3, 7, 9, 5, 2)
    assert format_dutch_date(dt) == "7 maart 2026"
    assert default_quote_id(dt) == "Q-20260307-090502"


@pytest.mark.parametrize("name, expected", [
    ("Q-20261019-083000", "Q-20261019-083000"),
    ("2026/001", "2026_001"),
    ("../escaped", "__escaped"),
    ("..\\..\\win", "____win"),
    ('Q "1"', "Q _1_"),
    ("Q\n1\t", "Q_1_"),
    ("..", "_"),
    ("", "quote"),
])
def test_safe_file_name(name, expected):
    assert safe_file_name(name) == expected


@pytest.mark.asyncio
async def test_fetch_logo_writes_a_fresh_file_per_call(tmp_path):
    transport = httpx.MockTransport(lambda r: httpx.Response(200, content=b"png"))
    async with httpx.AsyncClient(transport=transport) as http:
        first = await fetch_logo("https://cdn.test/logo.png", tmp_path, http)
        second = await fetch_logo("https://cdn.test/logo.png", tmp_path, http)

    assert first != second
    assert first.read_bytes() == second.read_bytes() == b"png"
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted([first.name, second.name])
