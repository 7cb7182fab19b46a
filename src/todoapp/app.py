from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from todoapp.config import Config
from todoapp.core.backend import CookieStorage, SupabaseBackend
from todoapp.core.core import Core, Services
from todoapp.core.modules.auth.models import AuthResult, User
from todoapp.core.modules.todo.models import Todo, TodoList, TodoStatus, TodoUpdate
from todoapp.core.validation import ensure_valid, validate_email, validate_password
from todoapp.errors import AuthenticationError


class App:
    """Facade for all application operations, resolves the acting user before delegating to services.

    The user ID handed to todo operations always comes from the session, never from request input.
    """

    def __init__(self, config: Config, backend: SupabaseBackend | None = None) -> None:
        self._core = Core(config, backend)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def connect(self, storage: CookieStorage) -> Services:
        """Open request-scoped services whose session is read from and written to `storage`."""
        return await self._core.connect(storage)

    async def register(self, services: Services, email: str, password: str) -> AuthResult:
        """Create an account after checking email format and password strength."""
        ensure_valid(validate_email(email))
        ensure_valid(validate_password(password))
        return await services.auth.sign_up(email, password)

    async def login(self, services: Services, email: str, password: str) -> AuthResult:
        """Sign in with email and password; the session is persisted to cookies."""
        ensure_valid(validate_email(email))
        return await services.auth.sign_in(email, password)

    async def logout(self, services: Services) -> None:
        await services.auth.sign_out()

    async def get_current_user(self, services: Services) -> User:
        """Get the signed-in user, raising AuthenticationError without a session."""
        user = await services.auth.get_current_user()
        if user is None:
            raise AuthenticationError
        return user

    async def get_todos(self, services: Services, status: TodoStatus = TodoStatus.ALL) -> TodoList:
        """List the current user's todos filtered by status, with per-status counts."""
        user = await self.get_current_user(services)
        todos = await services.todo.get_todos(str(user.id))
        return TodoList.from_todos(todos, status)

    async def create_todo(self, services: Services, title: str) -> Todo:
        user = await self.get_current_user(services)
        return await services.todo.create_todo(str(user.id), title)

    async def update_todo(self, services: Services, todo_id: str, update: TodoUpdate) -> Todo:
        """Update title and/or completion of one of the current user's todos (partial update)."""
        user = await self.get_current_user(services)
        return await services.todo.update_todo(str(user.id), todo_id, update)

    async def toggle_todo(self, services: Services, todo_id: str, completed: bool) -> Todo:
        user = await self.get_current_user(services)
        return await services.todo.toggle_todo(str(user.id), todo_id, completed)

    async def delete_todo(self, services: Services, todo_id: str) -> None:
        user = await self.get_current_user(services)
        await services.todo.delete_todo(str(user.id), todo_id)
