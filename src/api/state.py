import logging
from dataclasses import dataclass
from typing import Optional

from api.backend import BackendAPI
from api.settings import Settings
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient
from llm.providers.base import LLMProvider
from llm.providers.cohere_provider import CohereProvider
from llm.providers.mock_provider import MockProvider
from llm.providers.openai_provider import OpenAIProvider
from storage.base import TaskStore, UserStore
from storage.db import Database
from storage.memory_store import MemoryTaskStore, MemoryUserStore
from storage.postgres_store import PostgresTaskStore, PostgresUserStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the request handlers need, built once at startup."""
    settings: Settings
    task_store: TaskStore
    user_store: UserStore
    llm_client: LLMClient
    backend: BackendAPI
    database: Optional[Database] = None

    async def close(self) -> None:
        if self.database is not None:
            await self.database.close()


def build_provider(settings: Settings) -> LLMProvider:
    if settings.llm_provider == "mock":
        logger.warning("Using the mock LLM provider; tasks are derived by keyword matching")
        return MockProvider()
    if settings.llm_provider == "openai":
        provider = OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout_s,
        )
    elif settings.llm_provider == "cohere":
        provider = CohereProvider(
            api_key=settings.cohere_api_key,
            model=settings.cohere_model,
            base_url=settings.cohere_base_url,
            timeout=settings.llm_timeout_s,
        )
    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.llm_provider!r}")

    if not provider.is_configured:
        logger.warning(f"{provider.name} API key is not set; note parsing will be rejected until it is")
    return provider


def build_llm_client(settings: Settings, provider: Optional[LLMProvider] = None) -> LLMClient:
    provider = provider or build_provider(settings)
    model = None
    if settings.llm_provider == "cohere":
        model = settings.cohere_model
    elif settings.llm_provider == "openai":
        model = settings.openai_model
    return LLMClient(provider=provider, model=model)


def build_memory_services(settings: Settings, provider: Optional[LLMProvider] = None) -> Services:
    task_store = MemoryTaskStore()
    llm_client = build_llm_client(settings, provider)
    extractor = TaskExtractor(llm_client, strict=settings.strict_ai_output)
    return Services(
        settings=settings,
        task_store=task_store,
        user_store=MemoryUserStore(),
        llm_client=llm_client,
        backend=BackendAPI(extractor, task_store),
    )


async def build_services(settings: Settings) -> Services:
    """Composition root: connect storage and wire the pipeline."""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage (data is lost on restart)")
        return build_memory_services(settings)

    if settings.storage_backend != "postgres":
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")

    database = Database(
        settings.database_url,
        min_size=settings.db_pool_min,
        max_size=settings.db_pool_max,
    )
    await database.connect()
    try:
        await database.init_schema()
    except Exception:
        await database.close()
        raise

    task_store = PostgresTaskStore(database)
    llm_client = build_llm_client(settings)
    extractor = TaskExtractor(llm_client, strict=settings.strict_ai_output)
    return Services(
        settings=settings,
        task_store=task_store,
        user_store=PostgresUserStore(database),
        llm_client=llm_client,
        backend=BackendAPI(extractor, task_store),
        database=database,
    )
