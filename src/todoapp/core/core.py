from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from supabase import AsyncClient

from todoapp.config import Config
from todoapp.core.backend import CookieStorage, SupabaseBackend

if TYPE_CHECKING:
    from todoapp.core.modules.auth.service import AuthService
    from todoapp.core.modules.todo.service import TodoService

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services bound to one request's backend client."""

    def __init__(self, client: AsyncClient, storage: CookieStorage) -> None:
        self.client = client
        self.storage = storage


class Services:
    """Request-scoped service registry sharing one backend client."""

    auth: AuthService
    todo: TodoService

    def __init__(self, client: AsyncClient, storage: CookieStorage) -> None:
        # Imported here: the service modules import Service from this module
        from todoapp.core.modules.auth.service import AuthService  # noqa: PLC0415
        from todoapp.core.modules.todo.service import TodoService  # noqa: PLC0415

        self.auth = AuthService(client, storage)
        self.todo = TodoService(client, storage)


class Core:
    """Container providing config and the backend handle, and opening request-scoped services."""

    config: Config
    backend: SupabaseBackend

    def __init__(self, config: Config, backend: SupabaseBackend | None = None) -> None:
        self.config = config
        self.backend = backend or SupabaseBackend.from_config(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        logger.info("core_started", supabase_url=self.backend.url)
        try:
            yield
        finally:
            logger.info("core_stopped")

    async def connect(self, storage: CookieStorage) -> Services:
        """Open services for one request and restore its session from cookies."""
        client = await self.backend.connect(storage)
        services = Services(client, storage)
        await services.auth.restore_session()
        return services
