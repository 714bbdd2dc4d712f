"""Quote PDF rendering."""
from roofquote.config import Settings
from roofquote.schemas.quote import QuoteMeta
from roofquote.services.company import CompanyProfile, load_company_profile
from roofquote.services.quote_pdf import render_quote_pdf


def _company(**overrides):
    data = {
        "name": "Dakwerken Test & Zonen",
        "tagline": "Daken <sinds> 1998",
        "address": "Dorpsstraat 1, 9000 Gent",
        "vat": "BE 0000.000.000",
        "phone": "+32 9 000 00 00",
        "email": "info@test.be",
        "website": "https://test.be",
        "wayOfWorking": ["Plaatsbezoek", "Vaste prijs"],
        "terms": ["30 dagen geldig"],
    }
    data.update(overrides)
    return CompanyProfile.model_validate(data)


def _meta(**overrides):
    values = {"quote_id": "Q-20261019-101500", "date": "19 oktober 2026"}
    values.update(overrides)
    return QuoteMeta(**values)


def test_render_with_both_images(make_image):
    before = make_image("before.jpg")
    after = make_image("after.png", size=(400, 300), color=(30, 30, 30))
    logo = make_image("logo.png", size=(200, 60), color=(235, 92, 37))

    pdf = render_quote_pdf(
        company=_company(logo=str(logo)),
        meta=_meta(client_name="Jan Peeters", site_address="Kerkstraat 5"),
        bullets=["We vervangen de pannen.", "We plaatsen nieuwe goten <zink>."],
        before_image=before,
        after_image=after,
        show_after_placeholder=False,
    )

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_render_with_placeholders_and_missing_files(tmp_path):
    pdf = render_quote_pdf(
        company=_company(logo=str(tmp_path / "missing-logo.png"), wayOfWorking=[], terms=[]),
        meta=_meta(),
        bullets=["We vervangen de pannen."],
        before_image=tmp_path / "does-not-exist.jpg",
        after_image=None,
        show_after_placeholder=True,
    )

    assert pdf.startswith(b"%PDF")


def test_render_survives_unreadable_image_and_bad_colour(tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not an image")

    pdf = render_quote_pdf(
        company=_company(brandColor="not-a-colour"),
        meta=_meta(),
        bullets=["Eén bullet."],
        before_image=broken,
        after_image=broken,
        show_after_placeholder=False,
    )

    assert pdf.startswith(b"%PDF")


def test_bundled_company_profile_loads():
    company = load_company_profile(Settings().COMPANY_CONFIG_PATH)

    assert company.name
    assert company.way_of_working
    assert company.terms_title == "Voorwaarden"
