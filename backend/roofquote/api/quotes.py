"""Quote API: multipart upload in, branded PDF out (streamed or written to disk)."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from roofquote.config import Settings, get_settings
from roofquote.schemas.quote import QuoteFileResponse, QuoteRequest
from roofquote.services.media import save_upload
from roofquote.services.providers.nano_banana import ImageTaskError
from roofquote.services.quote_builder import build_quote

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Quotes"])

QUOTE_FAILED_MESSAGE = "Aanmaken van de PDF-offerte is mislukt."
RESPONSE_MODES = ("file", "buffer")


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def describe_error(exc: Exception) -> str:
    """Diagnostic detail for a failed quote; image-task errors keep their kind."""
    if isinstance(exc, ImageTaskError):
        return f"{exc.kind}: {exc}"
    return str(exc) or exc.__class__.__name__


def resolve_response_mode(query_value: str | None, form_value: str | None, default: str) -> str:
    mode = (query_value or form_value or default or "file").strip().lower()
    return mode if mode in RESPONSE_MODES else "file"


@router.get("/health")
async def health():
    """Liveness probe."""
    return {"ok": True}


@router.post("/quote")
async def create_quote(
    before: UploadFile | None = File(None),
    after: UploadFile | None = File(None),
    description: str | None = Form(None),
    client_name: str = Form("", alias="clientName"),
    site_address: str = Form("", alias="siteAddress"),
    quote_id: str | None = Form(None, alias="quoteId"),
    generate_after: str = Form("true", alias="generateAfter"),
    response_form: str | None = Form(None, alias="response"),
    response_query: str | None = Query(None, alias="response"),
    settings: Settings = Depends(get_settings),
):
    """Generate a roof-renovation quote PDF.

    ``response=buffer`` returns the PDF as a download; ``response=file``
    stores it under OUTPUT_DIR and returns its location.
    """
    if before is None or not before.filename:
        return _bad_request("Ontbrekende vereiste: bestand 'before'.")
    if not description or not description.strip():
        return _bad_request("Ontbrekende vereiste: veld 'description'.")

    try:
        before_path = await save_upload(before, settings.UPLOADS_DIR)
        after_path = None
        if after is not None and after.filename:
            after_path = await save_upload(after, settings.UPLOADS_DIR)

        document = await build_quote(
            QuoteRequest(
                description=description,
                before_path=before_path,
                after_path=after_path,
                client_name=client_name or "",
                site_address=site_address or "",
                quote_id=quote_id or None,
                generate_after=generate_after.strip().lower() == "true",
            ),
            settings,
        )

        mode = resolve_response_mode(response_query, response_form, settings.default_response_mode)
        if mode == "buffer":
            return Response(
                content=document.pdf_bytes,
                media_type="application/pdf",
                headers={"Content-Disposition": f'attachment; filename="{document.file_name}"'},
            )

        output_dir = Path(settings.OUTPUT_DIR)
        output_dir.mkdir(parents=True, exist_ok=True)
        pdf_path = output_dir / document.file_name
        pdf_path.write_bytes(document.pdf_bytes)
        logger.info("Quote %s written to %s", document.quote_id, pdf_path)

        return QuoteFileResponse(
            fileName=document.file_name,
            pdfPath=str(pdf_path.resolve()),
            url=f"/output/{quote(document.file_name)}",
        )

    except Exception as e:
        logger.exception("Quote generation failed")
        return JSONResponse(
            status_code=500,
            content={"error": QUOTE_FAILED_MESSAGE, "details": describe_error(e)},
        )
