"""Dutch copywriting for quotes: work-description bullets and image-edit prompts."""

from __future__ import annotations

import logging
import re

from roofquote.services.llm_client import llm_call

logger = logging.getLogger(__name__)

_BULLET_MARKER = re.compile(r"^\s*[-*•]\s*")

BULLETS_SYSTEM_PROMPT = (
    "Je schrijft korte, duidelijke Nederlandstalige werkomschrijvingen "
    "voor offertes van dakrenovaties."
)

EDIT_PROMPT_SYSTEM_PROMPT = (
    "Je schrijft precieze image-editing prompts voor dakrenovaties. "
    "Realistisch, behoud perspectief en geometrie."
)


def parse_bullets(text: str) -> list[str]:
    """Split text into lines, strip list markers and drop blanks."""
    lines = (_BULLET_MARKER.sub("", line).strip() for line in text.splitlines())
    return [line for line in lines if line]


async def generate_dutch_bullets(points: list[str]) -> list[str]:
    """Rewrite raw scope points as 4–7 short Dutch bullets.

    Falls back to the input points if the model returns nothing usable.
    """
    prompt = f"""
Je bent een professionele copywriter voor een dakrenovatiebedrijf. Zet de volgende kernpunten om naar 4–7 korte, heldere opsommingstekens in het Nederlands (geen lange alinea). Schrijf in de toekomende tijd en vermijd marketingtaal. Elke bullet één zin.

Kernpunten:
{chr(10).join(points)}

Vereisten:
- Houd het concreet en begrijpelijk voor een particuliere klant.
- Gebruik geen sub-bullets, geen emojis.
- Geen inleidende of afsluitende alinea; enkel bullets.
""".strip()

    text = await llm_call(
        BULLETS_SYSTEM_PROMPT,
        prompt,
        temperature=0.6,
        caller="bullets",
    )
    bullets = parse_bullets(text.strip())
    if not bullets:
        logger.warning("LLM returned no bullets, falling back to %d input point(s)", len(points))
        return list(points)
    return bullets


async def generate_after_edit_prompt(points: list[str], before_image_url: str) -> str:
    """Build an image-editing prompt that turns the BEFORE photo into a realistic AFTER photo."""
    scope = "\n".join(f"- {p}" for p in points)
    content = [
        {
            "type": "text",
            "text": (
                "Maak een beknopte, uitvoerbare edit-prompt (max. 120 woorden) om de "
                "BEFORE-foto te transformeren naar een realistische AFTER-foto op basis "
                "van onderstaande scope."
            ),
        },
        {"type": "text", "text": f"BEFORE URL: {before_image_url}"},
        {
            "type": "text",
            "text": f"""Scope:
{scope}

Eisen:
- Zelfde camerahoek, dakhelling en gebouwvolume behouden.
- Pas enkel zichtbare elementen aan volgens de scope (nieuwe pannen, goten, dakramen, etc.). Interne isolatie niet zichtbaar maken.
- Opgeruimde werf, afgewerkt resultaat.
- Natuurlijk daglicht, realistische materialen/kleuren.
- Beschrijf wat te wijzigen en wat te behouden; geen marketingzin.""",
        },
    ]

    text = await llm_call(
        EDIT_PROMPT_SYSTEM_PROMPT,
        content,
        temperature=0.5,
        caller="edit_prompt",
    )
    return text.strip()
