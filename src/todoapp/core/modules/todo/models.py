from datetime import datetime
from enum import StrEnum
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Todo(BaseModel):
    """Todo row as stored in the remote `todos` table."""

    id: UUID = Field(..., description="Todo ID")
    user_id: UUID = Field(..., description="ID of the owning user")
    title: str = Field(..., description="Sanitized title, 1-500 characters")
    completed: bool = Field(..., description="Completion flag")
    created_at: datetime = Field(..., description="Creation timestamp assigned by the backend")


class TodoUpdate(BaseModel):
    """Partial update of a todo. Fields left as None are not sent to the backend."""

    title: str | None = Field(None, description="New title (validated and sanitized)")
    completed: bool | None = Field(None, description="New completion flag")

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_payload(self) -> dict[str, str | bool]:
        """Fields to write, excluding those not supplied."""
        return self.model_dump(exclude_none=True)


class TodoStatus(StrEnum):
    """Listing filter applied to a user's todos."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    def matches(self, todo: Todo) -> bool:
        if self is TodoStatus.ACTIVE:
            return not todo.completed
        if self is TodoStatus.COMPLETED:
            return todo.completed
        return True


class TodoList(BaseModel):
    """Todos selected by a status filter, with counts over all of the user's todos."""

    items: list[Todo] = Field(..., description="Todos matching the status filter, newest first")
    status: TodoStatus = Field(..., description="Applied status filter")
    total: int = Field(..., description="Number of todos regardless of status", ge=0)
    active: int = Field(..., description="Number of todos not yet completed", ge=0)
    completed: int = Field(..., description="Number of completed todos", ge=0)

    @classmethod
    def from_todos(cls, todos: list[Todo], status: TodoStatus = TodoStatus.ALL) -> Self:
        completed = sum(1 for todo in todos if todo.completed)
        return cls(
            items=[todo for todo in todos if status.matches(todo)],
            status=status,
            total=len(todos),
            active=len(todos) - completed,
            completed=completed,
        )
