"""Pytest configuration helpers.

This conftest ensures the backend directory is on `sys.path` so tests can
import the `roofquote` package regardless of how pytest is invoked, and points
storage and external keys at throwaway values before the app is imported.
"""
import os
import sys
import tempfile

import pytest
from PIL import Image


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

_STORAGE = tempfile.mkdtemp(prefix="roofquote-tests-")
os.environ.setdefault("UPLOADS_DIR", os.path.join(_STORAGE, "uploads"))
os.environ.setdefault("OUTPUT_DIR", os.path.join(_STORAGE, "output"))
os.environ.setdefault("LOGO_URL", "")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-0000000000000000")
os.environ.setdefault("NANO_BANANA_API_KEY", "")
os.environ.setdefault("PUBLIC_BASE_URL", "")

from roofquote.config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with storage under tmp_path and no outbound keys."""
    return Settings(
        UPLOADS_DIR=str(tmp_path / "uploads"),
        OUTPUT_DIR=str(tmp_path / "output"),
        LOGO_URL="",
        OPENAI_API_KEY="sk-test-0000000000000000",
        NANO_BANANA_API_KEY="",
        PUBLIC_BASE_URL="",
        RESPONSE_MODE="file",
    )


@pytest.fixture
def make_image(tmp_path):
    """Write a small solid-colour image and return its path."""
    def _make(name: str = "before.jpg", size=(320, 240), color=(120, 90, 60)):
        path = tmp_path / name
        Image.new("RGB", size, color=color).save(path)
        return path
    return _make
