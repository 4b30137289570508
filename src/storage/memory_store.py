"""
In-process stores used for local development (STORAGE_BACKEND=memory) and tests.

Same contract as the PostgreSQL stores, including the seeded category set and
all-or-nothing batch inserts.
"""

import itertools
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from storage.base import TaskStore, UserStore
from task_organizer.models import (
    DEFAULT_CATEGORY_COLORS,
    Category,
    EnrichedTask,
    NewTask,
    Priority,
    RawNote,
    Task,
    TaskStatus,
    User,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def default_categories() -> List[Category]:
    return [
        Category(id=i, name=name.value, color=color)
        for i, (name, color) in enumerate(DEFAULT_CATEGORY_COLORS.items(), start=1)
    ]


class MemoryTaskStore(TaskStore):

    def __init__(self, categories: Optional[Sequence[Category]] = None):
        self.categories: Dict[int, Category] = {
            c.id: c for c in (default_categories() if categories is None else categories)
        }
        self.raw_notes: List[RawNote] = []
        self.tasks: Dict[int, Task] = {}
        self._note_ids = itertools.count(1)
        self._task_ids = itertools.count(1)

    async def insert_raw_note(self, owner_id: int, text: str) -> int:
        note = RawNote(id=next(self._note_ids), owner_id=owner_id, text=text, created_at=_now())
        self.raw_notes.append(note)
        return note.id

    async def list_raw_notes(self, owner_id: int, limit: int = 20) -> List[RawNote]:
        owned = [n for n in self.raw_notes if n.owner_id == owner_id]
        return list(reversed(owned))[:limit]

    async def list_categories(self) -> List[Category]:
        return sorted(self.categories.values(), key=lambda c: c.name)

    async def insert_tasks(self, owner_id: int, tasks: Sequence[NewTask]) -> List[int]:
        # validate the whole batch first so a bad row leaves nothing behind
        for task in tasks:
            if task.category_id not in self.categories:
                raise ValueError(f"Unknown category id {task.category_id}")

        ids = []
        for task in tasks:
            now = _now()
            row = Task(
                id=next(self._task_ids),
                owner_id=owner_id,
                title=task.title,
                priority=task.priority,
                category_id=task.category_id,
                status=TaskStatus.PENDING,
                notes=task.notes,
                created_at=now,
                updated_at=now,
            )
            self.tasks[row.id] = row
            ids.append(row.id)
        return ids

    def _enrich(self, task: Task) -> EnrichedTask:
        return EnrichedTask(
            id=task.id,
            title=task.title,
            priority=task.priority,
            status=task.status,
            category=self.categories[task.category_id],
            notes=task.notes,
            created_at=task.created_at,
            updated_at=task.updated_at,
            completed_at=task.completed_at,
        )

    async def fetch_tasks_by_ids(self, ids: Sequence[int]) -> List[EnrichedTask]:
        return [self._enrich(self.tasks[i]) for i in ids if i in self.tasks]

    async def list_tasks(
        self,
        owner_id: int,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        category: Optional[str] = None,
    ) -> List[EnrichedTask]:
        out = []
        for task in sorted(self.tasks.values(), key=lambda t: (t.created_at, t.id), reverse=True):
            if task.owner_id != owner_id:
                continue
            if status is not None and task.status != status:
                continue
            if priority is not None and task.priority != priority:
                continue
            if category and self.categories[task.category_id].name != category:
                continue
            out.append(self._enrich(task))
        return out

    async def get_task(self, owner_id: int, task_id: int) -> Optional[EnrichedTask]:
        task = self.tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        return self._enrich(task)

    async def update_task(self, owner_id: int, task_id: int, changes: dict) -> Optional[EnrichedTask]:
        task = self.tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None

        update = {k: v for k, v in changes.items() if k in ("status", "priority", "title", "notes")}
        now = _now()
        update["updated_at"] = now

        new_status = changes.get("status")
        if new_status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
            update["completed_at"] = now
        elif new_status == TaskStatus.PENDING and task.status != TaskStatus.PENDING:
            update["completed_at"] = None

        task = task.model_copy(update=update)
        self.tasks[task_id] = task
        return self._enrich(task)

    async def delete_task(self, owner_id: int, task_id: int) -> bool:
        task = self.tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return False
        del self.tasks[task_id]
        return True


class MemoryUserStore(UserStore):

    def __init__(self):
        self.users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    async def create_user(self, email: str, name: str, password_hash: str) -> Optional[User]:
        if await self.get_user_by_email(email) is not None:
            return None
        user = User(
            id=next(self._ids),
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=_now(),
        )
        self.users[user.id] = user
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)
