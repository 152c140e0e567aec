"""
Configuration for the Clotheme backend.
Values come from environment variables (a local .env file is loaded first).
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise EnvironmentError(f"{name} must be an integer, got '{value}'")


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise EnvironmentError(f"{name} must be a number, got '{value}'")


@dataclass(frozen=True)
class Settings:
    """Runtime settings. Build with load_settings() to pick up the environment."""

    port: int = 3000
    openai_api_key: Optional[str] = None
    stylist_model: str = "gpt-4o"
    match_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    match_ai_ping: bool = False
    min_visible_results: int = 8
    max_results: int = 24
    image_base_url: str = "https://cdn.shopify.com"
    max_content_length_mb: int = 10
    cors_origins: str = "*"
    log_level: str = "INFO"
    log_dir: Optional[str] = None


def load_settings() -> Settings:
    return Settings(
        port=_get_int("PORT", 3000),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        stylist_model=os.getenv("STYLIST_MODEL", "gpt-4o"),
        match_model=os.getenv("MATCH_MODEL", "gpt-4o-mini"),
        openai_timeout_seconds=_get_float("OPENAI_TIMEOUT_SECONDS", 60.0),
        match_ai_ping=_get_bool("MATCH_AI_PING", False),
        min_visible_results=_get_int("MATCH_MIN_VISIBLE_RESULTS", 8),
        max_results=_get_int("MATCH_MAX_RESULTS", 24),
        image_base_url=os.getenv("CATALOG_IMAGE_BASE_URL", "https://cdn.shopify.com"),
        max_content_length_mb=_get_int("MAX_CONTENT_LENGTH_MB", 10),
        cors_origins=os.getenv("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=os.getenv("LOG_DIR") or None,
    )
