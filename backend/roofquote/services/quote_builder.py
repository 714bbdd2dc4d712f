"""Quote orchestrator that turns an uploaded request into a rendered PDF.

Steps run strictly in order for one request:
  company profile → Dutch bullets → after image (upload or NanoBanana) → PDF
Any failure is fatal to the request; only the logo is best-effort.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import httpx

from roofquote.config import Settings
from roofquote.schemas.quote import QuoteDocument, QuoteMeta, QuoteRequest
from roofquote.services.company import fetch_logo, load_company_profile
from roofquote.services.copywriter import (
    generate_after_edit_prompt,
    generate_dutch_bullets,
    parse_bullets,
)
from roofquote.services.media import (
    default_quote_id,
    download_file,
    format_dutch_date,
    now_ms,
    public_upload_url,
    safe_file_name,
)
from roofquote.services.providers.nano_banana import NanoBananaClient, NanoBananaConfig
from roofquote.services.quote_pdf import render_quote_pdf

logger = logging.getLogger(__name__)


def can_generate_after(settings: Settings) -> bool:
    """The image API needs a public URL for the before photo and an API key."""
    return bool(settings.PUBLIC_BASE_URL and settings.NANO_BANANA_API_KEY)


async def generate_after_image(
    bullets: list[str],
    before_path: Path,
    settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    image_client: NanoBananaClient | None = None,
) -> Path:
    """Create an AI 'after' impression of the before photo and store it locally."""
    before_url = public_upload_url(settings.PUBLIC_BASE_URL, before_path)
    edit_prompt = await generate_after_edit_prompt(bullets, before_url)
    logger.info("After-image edit prompt ready (%d chars) for %s", len(edit_prompt), before_url)

    client = image_client or NanoBananaClient(
        NanoBananaConfig.from_settings(settings),
        http_client=http_client,
    )
    task_id = await client.submit(edit_prompt, before_url, image_size="4:3", num_images=1)
    result_url = await client.poll(task_id)

    after_path = Path(settings.UPLOADS_DIR) / f"after-{now_ms()}.jpg"
    return await download_file(result_url, after_path, http_client)


async def build_quote(
    request: QuoteRequest,
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
    image_client: NanoBananaClient | None = None,
    now: datetime | None = None,
) -> QuoteDocument:
    """Run the whole quote pipeline and return the rendered PDF."""
    client = http_client or httpx.AsyncClient(timeout=60.0)
    own_client = http_client is None
    logo_path: Path | None = None

    try:
        company = load_company_profile(settings.COMPANY_CONFIG_PATH)
        company.brand_color = settings.BRAND_COLOR
        logo_path = await fetch_logo(settings.LOGO_URL, settings.UPLOADS_DIR, client)
        if logo_path:
            company.logo = str(logo_path)

        base_points = parse_bullets(request.description)
        bullets = await generate_dutch_bullets(base_points)

        after_path: Path | None = None
        after_generated = False
        if request.after_path:
            after_path = request.after_path
        elif request.generate_after and can_generate_after(settings):
            after_path = await generate_after_image(
                bullets, request.before_path, settings, client,
                image_client=image_client,
            )
            after_generated = True
        elif request.generate_after:
            logger.info("After-image generation skipped: PUBLIC_BASE_URL or NANO_BANANA_API_KEY not set")
    finally:
        if own_client:
            await client.aclose()

    now = now or datetime.now()
    quote_id = str(request.quote_id or default_quote_id(now))
    meta = QuoteMeta(
        quote_id=quote_id,
        date=format_dutch_date(now),
        client_name=request.client_name,
        site_address=request.site_address,
    )

    try:
        pdf_bytes = await asyncio.to_thread(
            render_quote_pdf,
            company=company,
            meta=meta,
            bullets=bullets,
            before_image=request.before_path,
            after_image=after_path,
            show_after_placeholder=after_path is None,
        )
    finally:
        if logo_path:
            logo_path.unlink(missing_ok=True)

    return QuoteDocument(
        quote_id=quote_id,
        file_name=f"{safe_file_name(quote_id)}.pdf",
        pdf_bytes=pdf_bytes,
        bullets=bullets,
        after_generated=after_generated,
    )
