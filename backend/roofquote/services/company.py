"""Company profile loading and brand logo retrieval."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roofquote.services.media import download_file

logger = logging.getLogger(__name__)

LOGO_PREFIX = "brand-logo"


class CompanyProfile(BaseModel):
    """Company details printed on every quote.

    Accepts both snake_case and the camelCase keys of company.json.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    tagline: str | None = None
    address: str = ""
    vat: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    way_of_working: list[str] = Field(default_factory=list)
    terms: list[str] = Field(default_factory=list)
    terms_title: str = "Voorwaarden"
    brand_color: str = "#eb5c25"
    logo: str | None = None


def load_company_profile(path: str | Path) -> CompanyProfile:
    """Read the company JSON file."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return CompanyProfile.model_validate(raw)


async def fetch_logo(
    logo_url: str,
    uploads_dir: str | Path,
    client: httpx.AsyncClient,
) -> Path | None:
    """Download the brand logo; returns None when unavailable.

    Each call writes its own file, so concurrent quotes never share one.
    A missing logo never blocks a quote.
    """
    if not logo_url:
        return None
    try:
        dest = Path(uploads_dir) / f"{LOGO_PREFIX}-{uuid.uuid4().hex}.png"
        return await download_file(logo_url, dest, client)
    except Exception as e:
        logger.warning("Logo download failed, proceeding without: %s", e)
        return None
