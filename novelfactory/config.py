# novelfactory/config.py
"""
Runtime configuration.

Values come from the environment (a ``.env`` file is honoured):

    NOVELFACTORY_HOME       data directory (default ~/.novelfactory)
    NOVELFACTORY_LOG_LEVEL  root log level (default WARNING)
    OPENROUTER_API_KEY      fills an empty OpenRouter key in the settings
    OPENAI_API_KEY          fills an empty OpenAI key in the settings
"""

from __future__ import annotations

import os
from pathlib import Path

import dotenv

from novelfactory.models import Settings

VERSION = "1.0.1"
APP_TITLE = "NovelFactory"
APP_URL = "https://novelfactory.ink"

MAX_SAVED_PROJECTS = 10
READING_SPEED_WPM = 250

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def load_env() -> None:
    dotenv.load_dotenv()


def home_dir(override: Path | None = None) -> Path:
    if override is not None:
        return override
    return Path(os.getenv("NOVELFACTORY_HOME") or Path.home() / ".novelfactory")


def log_level(default: str = "WARNING") -> str:
    return os.getenv("NOVELFACTORY_LOG_LEVEL", default)


def apply_env_keys(settings: Settings) -> Settings:
    """Fill empty API keys from the environment; stored keys win."""
    if not settings.openrouter_api_key and os.getenv("OPENROUTER_API_KEY"):
        settings.openrouter_api_key = os.environ["OPENROUTER_API_KEY"]
    if not settings.openai_api_key and os.getenv("OPENAI_API_KEY"):
        settings.openai_api_key = os.environ["OPENAI_API_KEY"]
    return settings
