"""Dutch copywriting helpers."""
import pytest

from roofquote.services import copywriter
from roofquote.services.copywriter import parse_bullets


def test_parse_bullets_strips_markers_and_blank_lines():
    text = "- Nieuwe dakpannen\r\n\n* Zinken goten\n  • Dakraam vervangen  \n\nIsolatie"
    assert parse_bullets(text) == [
        "Nieuwe dakpannen",
        "Zinken goten",
        "Dakraam vervangen",
        "Isolatie",
    ]


def test_parse_bullets_empty():
    assert parse_bullets("  \n \n") == []


@pytest.mark.asyncio
async def test_generate_dutch_bullets_parses_llm_output(monkeypatch):
    captured = {}

    async def fake_llm(system_prompt, user_content, **kwargs):
        captured["user"] = user_content
        captured["kwargs"] = kwargs
        return "- We zullen de pannen vervangen.\n- We zullen de goten vernieuwen.\n"

    monkeypatch.setattr(copywriter, "llm_call", fake_llm)
    bullets = await copywriter.generate_dutch_bullets(["pannen", "goten"])

    assert bullets == ["We zullen de pannen vervangen.", "We zullen de goten vernieuwen."]
    assert "pannen\ngoten" in captured["user"]
    assert captured["kwargs"]["temperature"] == 0.6


@pytest.mark.asyncio
async def test_generate_dutch_bullets_falls_back_to_input(monkeypatch):
    async def fake_llm(system_prompt, user_content, **kwargs):
        return "   \n"

    monkeypatch.setattr(copywriter, "llm_call", fake_llm)
    assert await copywriter.generate_dutch_bullets(["pannen"]) == ["pannen"]


@pytest.mark.asyncio
async def test_generate_after_edit_prompt_includes_scope_and_url(monkeypatch):
    captured = {}

    async def fake_llm(system_prompt, user_content, **kwargs):
        captured["parts"] = user_content
        return "  Vervang de pannen door antracietkleurige keramische pannen.  "

    monkeypatch.setattr(copywriter, "llm_call", fake_llm)
    prompt = await copywriter.generate_after_edit_prompt(
        ["Nieuwe pannen"], "https://public.test/uploads/dak.jpg",
    )

    assert prompt == "Vervang de pannen door antracietkleurige keramische pannen."
    texts = [p["text"] for p in captured["parts"]]
    assert "BEFORE URL: https://public.test/uploads/dak.jpg" in texts
    assert any("- Nieuwe pannen" in t for t in texts)
