from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from task_organizer.errors import AIErrorReason, AIServiceError


class LLMProvider(ABC):
    name = "llm"

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def generate(
        self,
        *,
        system: str,
        user: str,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """
        Must return the model output as TEXT (parsing/validation happens in extraction).
        Failures must be raised as AIServiceError.
        """
        raise NotImplementedError


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if data.get("message"):
            return str(data["message"])
    return response.text


def raise_for_provider_status(response: httpx.Response, provider: str) -> None:
    """Translate a non-2xx provider response into an AIServiceError."""
    if response.is_success:
        return

    status = response.status_code
    detail = _error_message(response)
    if status == 404:
        raise AIServiceError(
            AIErrorReason.MODEL_UNAVAILABLE,
            f"The AI model is not available. Please check your {provider} configuration. ({detail})",
        )
    if status in (401, 403):
        raise AIServiceError(
            AIErrorReason.UNAUTHORIZED,
            f"Invalid {provider} API key. Please check your credentials.",
        )
    raise AIServiceError(AIErrorReason.PROVIDER_ERROR, f"{provider} error ({status}): {detail}")


def post_json(
    url: str,
    *,
    provider: str,
    headers: dict,
    payload: dict,
    timeout: float,
    transport: Optional[httpx.BaseTransport] = None,
) -> dict:
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            r = client.post(url, headers=headers, json=payload)
    except httpx.HTTPError as e:
        raise AIServiceError(AIErrorReason.PROVIDER_ERROR, f"{provider} request failed: {e}") from e

    raise_for_provider_status(r, provider)
    try:
        return r.json()
    except ValueError as e:
        raise AIServiceError(
            AIErrorReason.PROVIDER_ERROR, f"{provider} returned a non-JSON response"
        ) from e
