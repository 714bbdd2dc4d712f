"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_DEFAULT_COMPANY_CONFIG = Path(__file__).parent / "data" / "company.json"


class Settings(BaseSettings):
    """Roof Quotes application settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "Roof Quotes API"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    PORT: int = 3000
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # --- Storage ---
    UPLOADS_DIR: str = "uploads"
    OUTPUT_DIR: str = "output"
    # Public base URL the image API uses to fetch uploaded photos
    PUBLIC_BASE_URL: str = ""

    # --- Response mode (file | buffer); empty means derive from ENVIRONMENT ---
    RESPONSE_MODE: str = ""

    # --- LLM (OpenAI-compatible chat completions) ---
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-4.1"
    LLM_TIMEOUT: int = 60
    LLM_MAX_RETRIES: int = 3

    # --- NanoBanana (image editing) ---
    NANO_BANANA_API_KEY: str = ""
    NANO_BANANA_BASE_URL: str = "https://api.nanobananaapi.ai/api/v1/nanobanana"
    NANO_CALLBACK_URL: str = "https://example.com/callback"
    NANO_REQUEST_TIMEOUT: float = 30.0
    NANO_POLL_TIMEOUT_MS: int = 120_000
    NANO_POLL_INTERVAL_MS: int = 2_500

    # --- Branding ---
    BRAND_COLOR: str = "#eb5c25"
    LOGO_URL: str = (
        "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcStNNa-sklLwVkBAUB9v6_oXXD6UPf76pgMug&s"
    )
    COMPANY_CONFIG_PATH: str = str(_DEFAULT_COMPANY_CONFIG)

    @property
    def default_response_mode(self) -> str:
        """Explicit RESPONSE_MODE wins; production streams, everything else writes files."""
        if self.RESPONSE_MODE:
            return self.RESPONSE_MODE.strip().lower()
        return "buffer" if self.ENVIRONMENT == "production" else "file"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
