"""
PostgreSQL-backed stores for users, raw notes, categories and tasks.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from storage.base import TaskStore, UserStore
from storage.db import Database
from task_organizer.models import (
    Category,
    EnrichedTask,
    NewTask,
    Priority,
    RawNote,
    TaskStatus,
    User,
)

logger = logging.getLogger(__name__)

_ENRICHED_SELECT = """
    SELECT t.*, c.name AS category_name, c.color AS category_color
    FROM tasks t
    JOIN categories c ON t.category_id = c.id
"""

# Columns a task update may touch, in a fixed order.
_UPDATABLE_COLUMNS = ("status", "priority", "title", "notes")


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def task_from_record(record) -> EnrichedTask:
    """Create an EnrichedTask from a tasks row joined with its category."""
    return EnrichedTask(
        id=record["id"],
        title=record["title"],
        priority=Priority(record["priority"]),
        status=TaskStatus(record["status"]),
        category=Category(
            id=record["category_id"],
            name=record["category_name"],
            color=record["category_color"],
        ),
        notes=record["notes"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
        completed_at=record["completed_at"],
    )


def _user_from_record(record) -> User:
    return User(
        id=record["id"],
        email=record["email"],
        name=record["name"],
        password_hash=record["password_hash"],
        created_at=record["created_at"],
    )


class PostgresTaskStore(TaskStore):

    def __init__(self, db: Database):
        self.db = db

    async def insert_raw_note(self, owner_id: int, text: str) -> int:
        note_id = await self.db.fetchval(
            "INSERT INTO raw_notes (user_id, raw_text) VALUES ($1, $2) RETURNING id",
            owner_id,
            text,
        )
        logger.info(f"Stored raw note {note_id} for user {owner_id} ({len(text)} chars)")
        return note_id

    async def list_raw_notes(self, owner_id: int, limit: int = 20) -> List[RawNote]:
        records = await self.db.fetch(
            """
            SELECT id, user_id, raw_text, created_at FROM raw_notes
            WHERE user_id = $1
            ORDER BY created_at DESC, id DESC
            LIMIT $2
            """,
            owner_id,
            limit,
        )
        return [
            RawNote(id=r["id"], owner_id=r["user_id"], text=r["raw_text"], created_at=r["created_at"])
            for r in records
        ]

    async def list_categories(self) -> List[Category]:
        records = await self.db.fetch("SELECT id, name, color FROM categories ORDER BY name")
        return [Category(id=r["id"], name=r["name"], color=r["color"]) for r in records]

    async def insert_tasks(self, owner_id: int, tasks: Sequence[NewTask]) -> List[int]:
        if not tasks:
            return []

        query = """
            INSERT INTO tasks (user_id, title, priority, category_id, notes)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id
        """
        ids: List[int] = []
        async with self.db.transaction() as conn:
            for task in tasks:
                task_id = await conn.fetchval(
                    query,
                    owner_id,
                    task.title,
                    _plain(task.priority),
                    task.category_id,
                    task.notes,
                )
                ids.append(task_id)

        logger.info(f"Inserted {len(ids)} tasks for user {owner_id}")
        return ids

    async def fetch_tasks_by_ids(self, ids: Sequence[int]) -> List[EnrichedTask]:
        if not ids:
            return []
        records = await self.db.fetch(
            _ENRICHED_SELECT
            + " WHERE t.id = ANY($1::int[]) ORDER BY array_position($1::int[], t.id)",
            list(ids),
        )
        return [task_from_record(r) for r in records]

    async def list_tasks(
        self,
        owner_id: int,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        category: Optional[str] = None,
    ) -> List[EnrichedTask]:
        conditions = ["t.user_id = $1"]
        params: list = [owner_id]

        if status is not None:
            params.append(_plain(status))
            conditions.append(f"t.status = ${len(params)}")
        if priority is not None:
            params.append(_plain(priority))
            conditions.append(f"t.priority = ${len(params)}")
        if category:
            params.append(category)
            conditions.append(f"c.name = ${len(params)}")

        query = (
            _ENRICHED_SELECT
            + " WHERE " + " AND ".join(conditions)
            + " ORDER BY t.created_at DESC, t.id DESC"
        )
        records = await self.db.fetch(query, *params)
        return [task_from_record(r) for r in records]

    async def get_task(self, owner_id: int, task_id: int) -> Optional[EnrichedTask]:
        record = await self.db.fetchrow(
            _ENRICHED_SELECT + " WHERE t.id = $1 AND t.user_id = $2",
            task_id,
            owner_id,
        )
        return task_from_record(record) if record else None

    async def update_task(self, owner_id: int, task_id: int, changes: dict) -> Optional[EnrichedTask]:
        async with self.db.transaction() as conn:
            current = await conn.fetchval(
                "SELECT status FROM tasks WHERE id = $1 AND user_id = $2 FOR UPDATE",
                task_id,
                owner_id,
            )
            if current is None:
                return None

            sets = ["updated_at = NOW()"]
            params: list = []
            for column in _UPDATABLE_COLUMNS:
                if column in changes:
                    params.append(_plain(changes[column]))
                    sets.append(f"{column} = ${len(params)}")

            new_status = _plain(changes.get("status"))
            if new_status == TaskStatus.COMPLETED.value and current != TaskStatus.COMPLETED.value:
                sets.append("completed_at = NOW()")
            elif new_status == TaskStatus.PENDING.value and current != TaskStatus.PENDING.value:
                sets.append("completed_at = NULL")

            params.append(task_id)
            await conn.execute(
                f"UPDATE tasks SET {', '.join(sets)} WHERE id = ${len(params)}",
                *params,
            )
            record = await conn.fetchrow(_ENRICHED_SELECT + " WHERE t.id = $1", task_id)

        return task_from_record(record)

    async def delete_task(self, owner_id: int, task_id: int) -> bool:
        result = await self.db.execute(
            "DELETE FROM tasks WHERE id = $1 AND user_id = $2",
            task_id,
            owner_id,
        )
        # execute returns e.g. "DELETE 1"
        return result == "DELETE 1"


class PostgresUserStore(UserStore):

    def __init__(self, db: Database):
        self.db = db

    async def create_user(self, email: str, name: str, password_hash: str) -> Optional[User]:
        record = await self.db.fetchrow(
            """
            INSERT INTO users (email, name, password_hash)
            VALUES ($1, $2, $3)
            ON CONFLICT (email) DO NOTHING
            RETURNING id, email, name, password_hash, created_at
            """,
            email,
            name,
            password_hash,
        )
        return _user_from_record(record) if record else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        record = await self.db.fetchrow(
            "SELECT id, email, name, password_hash, created_at FROM users WHERE email = $1",
            email,
        )
        return _user_from_record(record) if record else None

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        record = await self.db.fetchrow(
            "SELECT id, email, name, password_hash, created_at FROM users WHERE id = $1",
            user_id,
        )
        return _user_from_record(record) if record else None
