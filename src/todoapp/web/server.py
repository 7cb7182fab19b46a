from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from supabase_auth.errors import AuthError

from todoapp.app import App
from todoapp.config import Config
from todoapp.errors import UserError
from todoapp.web.error_handlers import auth_provider_error_handler, general_exception_handler, user_error_handler
from todoapp.web.middleware import SessionGateMiddleware
from todoapp.web.openapi import set_custom_openapi
from todoapp.web.routers import auth_router, todos_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        # Store app instance in app state
        app.state.app = app_instance
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Todo API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    app.add_middleware(SessionGateMiddleware)

    # CORS is added last so it wraps the session gate and also answers preflight requests
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router)
    app.include_router(todos_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(AuthError, auth_provider_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
