from unittest.mock import MagicMock

import pytest

from config.settings import Settings
from kairos.completion import CompletionClient
from kairos.storage import SupabaseStore


ENV_VARS = (
    "APP_ENV",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_KEY",
    "OPENAI_API_KEY",
    "OPENAI_API_URL",
    "OPENAI_MODEL",
    "MODEL_TEMPERATURE",
    "LEARN_TABLE",
    "REQUEST_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def settings(clean_env):
    clean_env.setenv("SUPABASE_URL", "https://demo.supabase.co")
    clean_env.setenv("SUPABASE_KEY", "anon-key")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    return Settings()


@pytest.fixture
def completion():
    return MagicMock(spec=CompletionClient)


@pytest.fixture
def store():
    return MagicMock(spec=SupabaseStore)
