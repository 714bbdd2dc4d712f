"""Quote PDF rendering with ReportLab: compact A4 layout with brand colour accents."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from xml.sax.saxutils import escape

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable, Image as RLImage, KeepTogether, ListFlowable, ListItem,
    Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from roofquote.schemas.quote import QuoteMeta
from roofquote.services.company import CompanyProfile

logger = logging.getLogger(__name__)

PAGE_MARGIN = 12 * mm
CONTENT_WIDTH = A4[0] - 2 * PAGE_MARGIN
GALLERY_GAP = 10
GALLERY_COL_WIDTH = (CONTENT_WIDTH - GALLERY_GAP) / 2
IMAGE_BOX_WIDTH = GALLERY_COL_WIDTH - 12
IMAGE_BOX_HEIGHT = 52 * mm
LOGO_HEIGHT = 36
CHIP_WIDTH = 22 * mm

FG = colors.HexColor("#141518")
MUTED = colors.HexColor("#5b6472")
BORDER = colors.HexColor("#e6e8ec")
BG_SOFT = colors.HexColor("#fafbfc")
PLACEHOLDER_BG = colors.HexColor("#f3f4f6")
PLACEHOLDER_FG = colors.HexColor("#475569")

AFTER_PENDING_TEXT = "Na-visual wordt gegenereerd en toegevoegd aan de definitieve offerte."
AFTER_MISSING_TEXT = "Na-foto niet beschikbaar"
BEFORE_MISSING_TEXT = "Voor-foto niet beschikbaar"


def _brand(company: CompanyProfile) -> colors.Color:
    try:
        return colors.HexColor(company.brand_color or "#eb5c25")
    except ValueError:
        logger.warning("Invalid brand colour %r, using default", company.brand_color)
        return colors.HexColor("#eb5c25")


def _tint(color: colors.Color, amount: float = 0.85) -> colors.Color:
    """Mix ``color`` towards white."""
    return colors.Color(
        color.red + (1 - color.red) * amount,
        color.green + (1 - color.green) * amount,
        color.blue + (1 - color.blue) * amount,
    )


def _styles(brand: colors.Color):
    s = getSampleStyleSheet()
    s.add(ParagraphStyle(name="Body", parent=s["Normal"], fontName="Helvetica",
                         fontSize=10, leading=14.5, textColor=FG))
    s.add(ParagraphStyle(name="Muted", parent=s["Body"], fontSize=9.2, leading=12,
                         textColor=MUTED))
    s.add(ParagraphStyle(name="Meta", parent=s["Body"], fontSize=9.6, leading=13))
    s.add(ParagraphStyle(name="CompanyName", parent=s["Body"], fontName="Helvetica-Bold",
                         fontSize=12.5, leading=16, spaceAfter=2))
    s.add(ParagraphStyle(name="SectionTitle", parent=s["Body"], fontName="Helvetica-Bold",
                         fontSize=11.5, leading=15, spaceBefore=8, spaceAfter=3))
    s.add(ParagraphStyle(name="Chip", parent=s["Body"], fontName="Helvetica-Bold",
                         fontSize=9.2, leading=11, textColor=brand))
    s.add(ParagraphStyle(name="Caption", parent=s["Muted"], alignment=1))
    s.add(ParagraphStyle(name="Placeholder", parent=s["Body"], fontSize=9.6, leading=13,
                         alignment=1, textColor=PLACEHOLDER_FG))
    return s


def _p(text: str | None, style) -> Paragraph:
    return Paragraph(escape(text or ""), style)


def _section_title(text: str, styles, brand: colors.Color) -> list:
    return [
        _p(text, styles["SectionTitle"]),
        HRFlowable(width="100%", thickness=2, color=brand, spaceBefore=0, spaceAfter=5),
    ]


def _bullet_list(items: list[str], styles, brand: colors.Color):
    return ListFlowable(
        [ListItem(_p(item, styles["Body"]), leftIndent=12) for item in items],
        bulletType="bullet",
        bulletColor=brand,
        bulletFontSize=7,
        leftIndent=12,
    )


def _card(flowables: list, *, background=colors.white) -> Table:
    t = Table([[flowables]], colWidths=[CONTENT_WIDTH])
    t.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), 0.75, BORDER),
        ("BACKGROUND", (0, 0), (-1, -1), background),
        ("LEFTPADDING", (0, 0), (-1, -1), 10),
        ("RIGHTPADDING", (0, 0), (-1, -1), 10),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))
    return t


def _fitted_image(path: str | Path | None, max_w: float, max_h: float) -> RLImage | None:
    """Scale an image to fit the box, keeping its aspect ratio.

    Returns None for missing or unreadable files.
    """
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        return None
    try:
        with Image.open(p) as im:
            w, h = im.size
    except (OSError, ValueError) as e:
        logger.warning("Cannot read image %s: %s", p, e)
        return None
    if not w or not h:
        return None
    scale = min(max_w / w, max_h / h)
    return RLImage(str(p), width=w * scale, height=h * scale)


def _placeholder(text: str, styles) -> Table:
    t = Table([[_p(text, styles["Placeholder"])]],
              colWidths=[IMAGE_BOX_WIDTH], rowHeights=[IMAGE_BOX_HEIGHT])
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), PLACEHOLDER_BG),
        ("BOX", (0, 0), (-1, -1), 0.75, colors.HexColor("#cbd5e1")),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ]))
    return t


def _figure(image_path, missing_text: str, caption: str, styles) -> list:
    img = _fitted_image(image_path, IMAGE_BOX_WIDTH, IMAGE_BOX_HEIGHT)
    body = img if img is not None else _placeholder(missing_text, styles)
    return [body, Spacer(1, 4), _p(caption, styles["Caption"])]


def _header(company: CompanyProfile, styles, brand: colors.Color) -> Table:
    logo = _fitted_image(company.logo, 60 * mm, LOGO_HEIGHT)
    chip = Table([[_p("Offerte", styles["Chip"])]], colWidths=[CHIP_WIDTH])
    chip.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), _tint(brand)),
        ("BOX", (0, 0), (-1, -1), 0.75, brand),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
        ("RIGHTPADDING", (0, 0), (-1, -1), 8),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]))
    if logo is not None:
        cells, widths = [logo, chip], [logo.drawWidth + 10, CHIP_WIDTH + 10]
    else:
        cells, widths = [chip], [CHIP_WIDTH + 10]
    t = Table([cells], colWidths=widths, hAlign="LEFT")
    t.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 10),
    ]))
    return t


def _company_block(company: CompanyProfile, meta: QuoteMeta, styles) -> Table:
    contact = "<br/>".join([
        escape(company.address),
        f"BTW: {escape(company.vat)}",
        f"{escape(company.phone)} · {escape(company.email)}",
        escape(company.website),
    ])
    info = [_p(company.name, styles["CompanyName"])]
    if company.tagline:
        info.append(_p(company.tagline, styles["Muted"]))
    info += [Spacer(1, 4), Paragraph(contact, styles["Body"]), Spacer(1, 6)]

    cells = [
        Paragraph(f"<b>Offertenummer:</b> {escape(meta.quote_id)}", styles["Meta"]),
        Paragraph(f"<b>Datum:</b> {escape(meta.date)}", styles["Meta"]),
    ]
    if meta.client_name:
        cells.append(Paragraph(f"<b>Klant:</b> {escape(meta.client_name)}", styles["Meta"]))
    if meta.site_address:
        cells.append(Paragraph(f"<b>Werf:</b> {escape(meta.site_address)}", styles["Meta"]))
    if len(cells) % 2:
        cells.append("")
    rows = [cells[i:i + 2] for i in range(0, len(cells), 2)]
    meta_tbl = Table(rows, colWidths=[(CONTENT_WIDTH - 20) / 2] * 2)
    meta_tbl.setStyle(TableStyle([
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("TOPPADDING", (0, 0), (-1, -1), 1),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
    ]))
    info.append(meta_tbl)
    return _card(info, background=BG_SOFT)


def _gallery(before_image, after_image, show_after_placeholder: bool, styles) -> Table:
    after_missing = AFTER_PENDING_TEXT if show_after_placeholder else AFTER_MISSING_TEXT
    row = [
        _figure(before_image, BEFORE_MISSING_TEXT, "Voor", styles),
        _figure(after_image, after_missing, "Na", styles),
    ]
    t = Table([row], colWidths=[GALLERY_COL_WIDTH, GALLERY_COL_WIDTH])
    t.setStyle(TableStyle([
        ("BOX", (0, 0), (0, 0), 0.75, BORDER),
        ("BOX", (1, 0), (1, 0), 0.75, BORDER),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    return t


def _footer_painter(company: CompanyProfile):
    def _inner(canv, doc):
        canv.saveState()
        y = PAGE_MARGIN - 6 * mm
        canv.setStrokeColor(BORDER)
        canv.line(PAGE_MARGIN, y + 4 * mm, A4[0] - PAGE_MARGIN, y + 4 * mm)
        canv.setFillColor(MUTED)
        canv.setFont("Helvetica", 9.2)
        canv.drawString(PAGE_MARGIN, y, f"Opgesteld door {company.name}")
        canv.drawRightString(A4[0] - PAGE_MARGIN, y, f"Pagina {doc.page}")
        canv.restoreState()
    return _inner


def render_quote_pdf(
    *,
    company: CompanyProfile,
    meta: QuoteMeta,
    bullets: list[str],
    before_image: str | Path | None,
    after_image: str | Path | None,
    show_after_placeholder: bool,
) -> bytes:
    """Render the quote as an A4 PDF and return its bytes."""
    brand = _brand(company)
    styles = _styles(brand)

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN + 6 * mm,
        title=f"Offerte {meta.quote_id} - {company.name}",
        author=company.name,
    )

    story: list = [
        _header(company, styles, brand),
        Spacer(1, 8),
        _company_block(company, meta, styles),
        Spacer(1, 8),
        _card(_section_title("Projectoverzicht", styles, brand)
              + [_bullet_list(bullets, styles, brand)]),
        Spacer(1, 4),
        KeepTogether(
            _section_title("Voor & Na — AI-impressie", styles, brand)
            + [_gallery(before_image, after_image, show_after_placeholder, styles)]
        ),
        Spacer(1, 8),
    ]
    if company.way_of_working:
        story += [
            _card(_section_title("Onze werkwijze", styles, brand)
                  + [_bullet_list(company.way_of_working, styles, brand)]),
            Spacer(1, 8),
        ]
    if company.terms:
        story.append(
            _card(_section_title(company.terms_title or "Voorwaarden", styles, brand)
                  + [_bullet_list(company.terms, styles, brand)])
        )

    painter = _footer_painter(company)
    doc.build(story, onFirstPage=painter, onLaterPages=painter)
    pdf = buf.getvalue()
    logger.info("Quote PDF rendered: %s (%d bytes)", meta.quote_id, len(pdf))
    return pdf
