from __future__ import annotations
from typing import Optional

import httpx

from task_organizer.errors import AIConfigurationError, AIErrorReason, AIServiceError
from .base import LLMProvider, post_json


class OpenAIProvider(LLMProvider):
    name = "OpenAI"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
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
                "OpenAI API key is not configured. Set OPENAI_API_KEY in the environment."
            )

        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
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
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError(
                AIErrorReason.PROVIDER_ERROR, "OpenAI response did not contain a message"
            ) from e
