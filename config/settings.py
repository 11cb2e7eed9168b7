from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _env(*names: str) -> Optional[str]:
    """Return the first non-empty value among ``names``."""
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. Missing credentials are
    not fatal: the dashboard reports them in its output area instead.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        # The NEXT_PUBLIC_ names are accepted so an existing frontend .env works as-is
        self.supabase_url: Optional[str] = _env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
        self.supabase_key: Optional[str] = _env("SUPABASE_KEY", "NEXT_PUBLIC_SUPABASE_KEY")
        self.openai_api_key: Optional[str] = _env("OPENAI_API_KEY")
        self.openai_api_url: str = os.getenv(
            "OPENAI_API_URL", "https://api.openai.com/v1/chat/completions"
        )
        self.openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o")
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
        self.learn_table: str = os.getenv("LEARN_TABLE", "learn_requests")
        self.request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "60.0"))

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
