import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_current_user, get_task_store
from storage.base import TaskStore
from task_organizer.models import User

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def get_raw_notes(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    task_store: TaskStore = Depends(get_task_store),
) -> dict:
    """Most recent raw notes submitted by the user, including ones that produced no tasks."""
    notes = await task_store.list_raw_notes(user.id, limit=limit)
    return {"notes": [n.model_dump(mode="json", by_alias=True) for n in notes]}
