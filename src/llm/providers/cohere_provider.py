from __future__ import annotations
from typing import Optional

import httpx

from task_organizer.errors import AIConfigurationError
from .base import LLMProvider, post_json

DEFAULT_COHERE_MODEL = "command-a-03-2025"


class CohereProvider(LLMProvider):
    name = "Cohere"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_COHERE_MODEL,
        base_url: str = "https://api.cohere.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model.strip()
        self.base_url = base_url.strip().rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate(
        self,
        *,
        system: str,
        user: str,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        if not self.api_key:
            raise AIConfigurationError(
                "Cohere API key is not configured. Set COHERE_API_KEY in the environment."
            )

        url = f"{self.base_url}/chat"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model or self.model,
            "message": user,
            "preamble": system,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        data = post_json(
            url,
            provider=self.name,
            headers=headers,
            payload=payload,
            timeout=self.timeout,
            transport=self.transport,
        )
        return (data.get("text") if isinstance(data, dict) else None) or ""
