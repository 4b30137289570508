import logging

from llm.prompts import SYSTEM_PREAMBLE
from llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)

# Low temperature keeps the JSON shape stable between calls.
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 1000


class LLMClient:
    """Single-shot gateway to the configured text-generation provider.

    Exactly one request per call; failures surface as AIServiceError and are
    never retried here.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def is_configured(self) -> bool:
        return self.provider.is_configured

    def complete(self, prompt: str) -> str:
        logger.info(
            f"Calling {self.provider.name} (model={self.model or 'provider default'}, "
            f"prompt_chars={len(prompt)})"
        )
        text = self.provider.generate(
            system=SYSTEM_PREAMBLE,
            user=prompt,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return text or ""
