from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from task_organizer.models import (
    Category,
    EnrichedTask,
    NewTask,
    Priority,
    RawNote,
    TaskStatus,
    User,
)


class TaskStore(ABC):
    """Persistence used by the parsing pipeline and the task endpoints.

    Every task query is scoped by owner where an owner is given.
    """

    @abstractmethod
    async def insert_raw_note(self, owner_id: int, text: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def list_raw_notes(self, owner_id: int, limit: int = 20) -> List[RawNote]:
        raise NotImplementedError

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        """All categories ordered by name."""
        raise NotImplementedError

    @abstractmethod
    async def insert_tasks(self, owner_id: int, tasks: Sequence[NewTask]) -> List[int]:
        """
        Insert all tasks as 'pending' in one transaction; all or nothing.
        Returns the new ids in input order.
        """
        raise NotImplementedError

    @abstractmethod
    async def fetch_tasks_by_ids(self, ids: Sequence[int]) -> List[EnrichedTask]:
        """Tasks joined with their category, in the order of `ids`."""
        raise NotImplementedError

    @abstractmethod
    async def list_tasks(
        self,
        owner_id: int,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        category: Optional[str] = None,
    ) -> List[EnrichedTask]:
        """Owner's tasks, newest first, optionally filtered."""
        raise NotImplementedError

    @abstractmethod
    async def get_task(self, owner_id: int, task_id: int) -> Optional[EnrichedTask]:
        raise NotImplementedError

    @abstractmethod
    async def update_task(self, owner_id: int, task_id: int, changes: dict) -> Optional[EnrichedTask]:
        """
        Apply `changes` (status, priority, title, notes) to an owned task.

        pending -> completed stamps completed_at; completed -> pending clears it.
        Returns None if the task does not exist or belongs to someone else.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_task(self, owner_id: int, task_id: int) -> bool:
        raise NotImplementedError


class UserStore(ABC):

    @abstractmethod
    async def create_user(self, email: str, name: str, password_hash: str) -> Optional[User]:
        """Returns None if the email is already registered."""
        raise NotImplementedError

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError
