from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 500


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def coerce(cls, value: Any) -> "Priority":
        """Exact match or Medium. Never raises."""
        for member in cls:
            if value == member.value:
                return member
        return cls.MEDIUM


class CategoryName(str, Enum):
    WORK = "Work"
    ADMIN = "Admin"
    MEETINGS = "Meetings"
    PERSONAL = "Personal"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Any) -> "CategoryName":
        for member in cls:
            if value == member.value:
                return member
        return cls.OTHER


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


# Seed colors for the fixed category set (kept in sync with storage/schema.sql)
DEFAULT_CATEGORY_COLORS = {
    CategoryName.WORK: "#3B82F6",
    CategoryName.ADMIN: "#8B5CF6",
    CategoryName.MEETINGS: "#F59E0B",
    CategoryName.PERSONAL: "#10B981",
    CategoryName.OTHER: "#6B7280",
}


class _ApiModel(BaseModel):
    """Serialized with camelCase keys; accepts either spelling on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(_ApiModel):
    id: int
    name: str
    color: str


class RawNote(_ApiModel):
    id: int
    owner_id: int
    text: str
    created_at: datetime


class ParsedTaskCandidate(BaseModel):
    """A task proposed by the model, not yet category-resolved or stored."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    category: CategoryName = CategoryName.OTHER

    @classmethod
    def from_raw(cls, item: Any) -> Optional["ParsedTaskCandidate"]:
        """
        Build a candidate from one decoded element of the model output.

        Unknown priority/category values are coerced to their defaults and the
        title is cut to TITLE_MAX_LENGTH. Returns None when the element is not
        an object or carries no usable title.
        """
        if not isinstance(item, dict):
            return None
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            return None
        return cls(
            title=title.strip()[:TITLE_MAX_LENGTH],
            priority=Priority.coerce(item.get("priority")),
            category=CategoryName.coerce(item.get("category")),
        )


class NewTask(BaseModel):
    """Row to insert: a candidate whose category has been resolved to an id."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    category_id: int
    notes: Optional[str] = None


class Task(_ApiModel):
    id: int
    owner_id: int
    title: str
    priority: Priority
    category_id: int
    status: TaskStatus = TaskStatus.PENDING
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class EnrichedTask(_ApiModel):
    """A stored task joined with its category's display name and color."""

    id: int
    title: str
    priority: Priority
    status: TaskStatus
    category: Category
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class TaskUpdate(_ApiModel):
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    def changes(self) -> dict:
        # notes is the only nullable column; an explicit null clears it
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k == "notes"}


class ParseResult(_ApiModel):
    message: str
    tasks: List[EnrichedTask] = Field(default_factory=list)


class User(_ApiModel):
    id: int
    email: str
    name: str
    password_hash: str = Field(exclude=True)
    created_at: datetime
