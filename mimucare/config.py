"""
Runtime configuration and logging setup.

Settings are read from the environment (and a local ``.env`` file) with
pydantic-settings. Provider credentials may be changed at runtime by building
a new ``Settings`` and passing it to ``ProviderRegistry.reconfigure``.
"""

import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .locale import SUPPORTED_LOCALES

load_dotenv()

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """Runtime settings for the Dr. Mimu assistant core."""

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    # AI provider credentials (blank = provider disabled)
    GEMINI_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    DEEPSEEK_API_KEY: str = ""

    # Models and OpenAI-compatible endpoints
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: Optional[str] = None
    DEEPSEEK_MODEL: str = "deepseek-chat"
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com/v1"

    # Request shaping
    PROVIDER_TIMEOUT_SECONDS: float = 20.0
    PROVIDER_MAX_TOKENS: int = 1000
    PROVIDER_TEMPERATURE: float = 0.7

    DEFAULT_LOCALE: str = "bn"
    DATA_DIR: str = ""
    LOG_LEVEL: str = "INFO"

    @field_validator("PROVIDER_TIMEOUT_SECONDS")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("PROVIDER_TIMEOUT_SECONDS must be positive")
        return value

    @field_validator("DEFAULT_LOCALE")
    @classmethod
    def _supported_locale(cls, value: str) -> str:
        if value not in SUPPORTED_LOCALES:
            raise ValueError(
                f"DEFAULT_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}"
            )
        return value


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, with keyword overrides on top."""
    return Settings(**overrides)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and the demo app."""
    if level is None:
        level = load_settings().LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
    # The HTTP client logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
