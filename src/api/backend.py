import asyncio
import logging

from classification.category_resolver import CategoryResolver
from extraction.task_extractor import TaskExtractor
from storage.base import TaskStore
from task_organizer.errors import AIConfigurationError
from task_organizer.models import NewTask, ParseResult

logger = logging.getLogger(__name__)

PARSED_MESSAGE = "Tasks parsed successfully"
NO_TASKS_MESSAGE = "No tasks parsed"


class BackendAPI:
    """Central orchestration component: raw note in, stored tasks out."""

    def __init__(self, extractor: TaskExtractor, task_store: TaskStore):
        self.extractor = extractor
        self.task_store = task_store

    async def submit_notes(self, owner_id: int, notes: str) -> ParseResult:
        """Accepts freeform notes (already validated) and runs the parsing pipeline."""

        # 0. Fail before any I/O when the AI provider has no credential
        if not self.extractor.is_configured:
            raise AIConfigurationError(
                "AI provider is not configured. Add the provider API key to the environment."
            )

        # 1. Keep the user's input even if everything after this fails
        note_id = await self.task_store.insert_raw_note(owner_id, notes)

        # 2. Extract candidates; the provider call is blocking, keep it off the event loop
        candidates = await asyncio.to_thread(self.extractor.extract, notes)
        logger.info(f"Note {note_id}: AI returned {len(candidates)} task candidates")

        if not candidates:
            return ParseResult(message=NO_TASKS_MESSAGE, tasks=[])

        # 3. Resolve category labels against the live category set
        resolver = CategoryResolver(await self.task_store.list_categories())
        new_tasks = [
            NewTask(
                title=c.title,
                priority=c.priority,
                category_id=resolver.resolve(c.category),
            )
            for c in candidates
        ]

        # 4. Persist all tasks atomically and read them back enriched
        ids = await self.task_store.insert_tasks(owner_id, new_tasks)
        tasks = await self.task_store.fetch_tasks_by_ids(ids)

        return ParseResult(message=PARSED_MESSAGE, tasks=tasks)
