import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from api.backend import BackendAPI
from api.dependencies import get_backend, get_current_user, get_task_store
from api.metrics import (
    NOTES_RECEIVED_TOTAL,
    REQUEST_LATENCY_SECONDS,
    REQUESTS_TOTAL,
    TASKS_PARSED_TOTAL,
)
from classification.category_resolver import CategoryResolver
from storage.base import TaskStore
from task_organizer.models import (
    TITLE_MAX_LENGTH,
    CategoryName,
    NewTask,
    ParseResult,
    Priority,
    TaskStatus,
    TaskUpdate,
    User,
)

router = APIRouter()
logger = logging.getLogger(__name__)

NOTES_MIN_LENGTH = 3
NOTES_MAX_LENGTH = 5000


class ParseNotesIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    raw_notes: str

    @field_validator("raw_notes")
    @classmethod
    def _notes_length(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("Task notes cannot be empty")
        if not NOTES_MIN_LENGTH <= len(v2) <= NOTES_MAX_LENGTH:
            raise ValueError(
                f"Task notes must be between {NOTES_MIN_LENGTH} and {NOTES_MAX_LENGTH} characters"
            )
        return v2


class CreateTaskIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    category: CategoryName = CategoryName.OTHER
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2


def _observe(endpoint: str, status: str, start: float) -> None:
    # Prometheus counters (best-effort)
    try:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    except Exception:
        pass


@router.post("/parse", response_model=ParseResult)
async def parse_notes(
    payload: ParseNotesIn,
    user: User = Depends(get_current_user),
    backend: BackendAPI = Depends(get_backend),
) -> ParseResult:
    """Turn a free-form note into stored tasks."""
    start = time.time()
    logger.info(f"Received notes from user {user.id}: {payload.raw_notes[:50]}...")
    NOTES_RECEIVED_TOTAL.inc()

    try:
        result = await backend.submit_notes(user.id, payload.raw_notes)
    except Exception:
        _observe("/api/tasks/parse", "error", start)
        raise

    TASKS_PARSED_TOTAL.inc(len(result.tasks))
    _observe("/api/tasks/parse", "processed", start)
    logger.info(f"Notes processed for user {user.id}. Tasks created: {len(result.tasks)}")
    return result


@router.get("/categories")
async def get_categories(
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    categories = await task_store.list_categories()
    return {"categories": [c.model_dump(by_alias=True) for c in categories]}


@router.get("")
async def get_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[Priority] = None,
    category: Optional[str] = None,
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    """Owner's tasks, newest first, optionally filtered by status, priority and category name."""
    tasks = await task_store.list_tasks(user.id, status=status, priority=priority, category=category)
    return {"tasks": [t.model_dump(mode="json", by_alias=True) for t in tasks]}


@router.post("", status_code=201)
async def create_task(
    payload: CreateTaskIn,
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    resolver = CategoryResolver(await task_store.list_categories())
    new_task = NewTask(
        title=payload.title,
        priority=payload.priority,
        category_id=resolver.resolve(payload.category),
        notes=payload.notes,
    )
    ids = await task_store.insert_tasks(user.id, [new_task])
    tasks = await task_store.fetch_tasks_by_ids(ids)
    return {"message": "Task created successfully", "task": tasks[0].model_dump(mode="json", by_alias=True)}


@router.patch("/{task_id}")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    if await task_store.get_task(user.id, task_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Task not found")

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="No updates provided")

    task = await task_store.update_task(user.id, task_id, changes)
    if task is None:
        # deleted between the check and the update
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Task not found")

    return {"message": "Task updated successfully", "task": task.model_dump(mode="json", by_alias=True)}


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    if not await task_store.delete_task(user.id, task_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Task not found")
    return {"message": "Task deleted successfully"}
