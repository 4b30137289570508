import asyncio

import pytest

from api.settings import DEV_JWT_SECRET, Settings
from storage.memory_store import MemoryTaskStore, MemoryUserStore
from storage.seed import DEMO_PASSWORD, DEMO_USERS, seed_demo_data
from task_organizer.models import TaskStatus
from task_organizer.security import verify_password


def test_seed_creates_demo_content_once():
    tasks, users = MemoryTaskStore(), MemoryUserStore()

    first = asyncio.run(seed_demo_data(tasks, users))
    second = asyncio.run(seed_demo_data(tasks, users))

    assert first == {"users": len(DEMO_USERS), "tasks": 15, "raw_notes": 3}
    assert second == {"users": 0, "tasks": 0, "raw_notes": 0}

    demo = asyncio.run(users.get_user_by_email("demo@example.com"))
    assert verify_password(DEMO_PASSWORD, demo.password_hash)

    completed = [t for t in tasks.tasks.values() if t.status is TaskStatus.COMPLETED]
    assert len(completed) == 3
    assert all(t.completed_at is not None for t in completed)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "Memory")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-x")
    monkeypatch.setenv("STRICT_AI_OUTPUT", "yes")
    monkeypatch.setenv("JWT_SECRET", "prod-secret")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.storage_backend == "memory"
    assert s.llm_provider == "openai"
    assert s.openai_api_key == "sk-x"
    assert s.strict_ai_output is True
    assert s.jwt_secret == "prod-secret"
    assert s.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in ("STORAGE_BACKEND", "LLM_PROVIDER", "COHERE_API_KEY", "STRICT_AI_OUTPUT", "JWT_SECRET"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.storage_backend == "postgres"
    assert s.llm_provider == "cohere"
    assert s.cohere_api_key is None
    assert s.strict_ai_output is False
    assert s.jwt_secret == DEV_JWT_SECRET


def test_unknown_provider_is_rejected():
    from api.state import build_provider

    with pytest.raises(ValueError):
        build_provider(Settings(llm_provider="ollama"))
