from typing import Any

import structlog

from todoapp.core.core import Service
from todoapp.core.modules.todo.models import Todo, TodoUpdate
from todoapp.core.validation import ensure_valid, is_valid_uuid, sanitize_todo_title, validate_todo_title
from todoapp.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

TABLE = "todos"


def _clean_title(title: str) -> str:
    """Validate a user-supplied title and return its sanitized form."""
    ensure_valid(validate_todo_title(title))
    sanitized = sanitize_todo_title(title)
    if not sanitized:
        raise ValidationError("Todo title cannot be empty")
    return sanitized


class TodoService(Service):
    """CRUD over the remote todos table, scoped to the owning user.

    Identifiers are checked before any request leaves the process, and every
    query also filters on `user_id`: a todo owned by someone else never matches,
    whatever the backend's row-level policies are.
    """

    def _table(self) -> Any:
        return self.client.table(TABLE)

    async def get_todos(self, user_id: str) -> list[Todo]:
        """Get the user's todos, newest first."""
        if not is_valid_uuid(user_id):
            raise ValidationError("Invalid user ID format")

        response = await self._table().select("*").eq("user_id", user_id).order("created_at", desc=True).execute()
        return [Todo.model_validate(row) for row in response.data or []]

    async def create_todo(self, user_id: str, title: str) -> Todo:
        """Create an open todo with a validated, sanitized title."""
        if not is_valid_uuid(user_id):
            raise ValidationError("Invalid user ID format")

        row = {"user_id": user_id, "title": _clean_title(title), "completed": False}
        response = await self._table().insert(row).execute()
        todo = Todo.model_validate(response.data[0])
        logger.debug("todo_created", todo_id=str(todo.id), user_id=user_id)
        return todo

    async def update_todo(self, user_id: str, todo_id: str, update: TodoUpdate) -> Todo:
        """Apply a partial update to one of the user's todos.

        Raises:
            ValidationError: If an identifier or the supplied title is invalid
            NotFoundError: If no todo with this ID belongs to the user
        """
        if not is_valid_uuid(user_id) or not is_valid_uuid(todo_id):
            raise ValidationError("Invalid ID format")

        payload: dict[str, Any] = update.to_payload()
        if not payload:
            raise ValidationError("No fields to update")
        if "title" in payload:
            payload = {**payload, "title": _clean_title(payload["title"])}

        response = await self._table().update(payload).eq("id", todo_id).eq("user_id", user_id).execute()
        if not response.data:
            raise NotFoundError
        logger.debug("todo_updated", todo_id=todo_id, user_id=user_id, fields=sorted(payload))
        return Todo.model_validate(response.data[0])

    async def delete_todo(self, user_id: str, todo_id: str) -> None:
        """Delete one of the user's todos. Deleting a missing or foreign todo is a no-op."""
        if not is_valid_uuid(user_id) or not is_valid_uuid(todo_id):
            raise ValidationError("Invalid ID format")

        response = await self._table().delete().eq("id", todo_id).eq("user_id", user_id).execute()
        logger.debug("todo_deleted", todo_id=todo_id, user_id=user_id, deleted_count=len(response.data or []))

    async def toggle_todo(self, user_id: str, todo_id: str, completed: bool) -> Todo:
        return await self.update_todo(user_id, todo_id, TodoUpdate(completed=completed))
