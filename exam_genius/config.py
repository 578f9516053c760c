"""
Configuration module for the exam sheet generator.
تنظیمات محیطی و مدل.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    GOOGLE_API_KEY: str | None = None

    # Gemini model used for generation and regeneration
    GEMINI_MODEL: str = DEFAULT_MODEL
    GENERATION_TEMPERATURE: float = 0.4

    # Upload limit for image/PDF sources (default: 10 MB)
    MAX_UPLOAD_MB: int = 10

    # Upper bound for the total requested question count
    MAX_TOTAL_QUESTIONS: int = 40

    # JSON file holding the saved generation config
    SETTINGS_FILE: str = str(Path.home() / ".exam-genius" / "settings.json")

    # Optional directory of .ttf/.otf fonts for PDF export (Persian glyphs)
    PDF_FONT_DIR: str | None = None

    # Comma-separated list of allowed CORS origins
    CORS_ORIGINS: str | None = None

    def __init__(self, **kwargs):
        """Load settings from environment variables."""
        defaults = {
            "GOOGLE_API_KEY": os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY"),
            "GEMINI_MODEL": os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            "GENERATION_TEMPERATURE": float(os.getenv("GENERATION_TEMPERATURE", "0.4")),
            "MAX_UPLOAD_MB": int(os.getenv("MAX_UPLOAD_MB", "10")),
            "MAX_TOTAL_QUESTIONS": int(os.getenv("MAX_TOTAL_QUESTIONS", "40")),
            "SETTINGS_FILE": os.getenv(
                "EXAM_GENIUS_SETTINGS_FILE",
                str(Path.home() / ".exam-genius" / "settings.json"),
            ),
            "PDF_FONT_DIR": os.getenv("PDF_FONT_DIR") or None,
            "CORS_ORIGINS": os.getenv("CORS_ORIGINS") or None,
        }
        defaults.update(kwargs)
        super().__init__(**defaults)

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return []
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# LLM pricing (USD per 1M tokens)
LLM_PRICING = {
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-pro": {"input": 1.25, "output": 10.0},
    "gemini-2.0-flash": {"input": 0.10, "output": 0.40},
}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    load_dotenv()
    return Settings()


def calculate_cost(model_name: str, input_tokens: int, output_tokens: int) -> float:
    """Price a call from its token counts. Unknown models cost 0."""
    pricing = LLM_PRICING.get(model_name)
    if pricing is None:
        return 0.0
    input_cost = (input_tokens / 1_000_000) * pricing["input"]
    output_cost = (output_tokens / 1_000_000) * pricing["output"]
    return input_cost + output_cost


def check_api_key() -> bool:
    """Check if the Gemini API key is configured."""
    return bool(get_settings().GOOGLE_API_KEY)
