from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from todoapp.core.backend import BASE64_PREFIX


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Todo API",
            version="0.1.0",
            summary="Personal todo lists on top of a hosted auth and database backend",
            routes=app.routes,
        )

        # Session cookies are written by the auth client; their names depend on its storage key
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": "supabase.auth.token",
                "description": (
                    f"Auth session stored by the server, `{BASE64_PREFIX}` encoded. "
                    "Large sessions are split into `.0`, `.1`, ... chunk cookies."
                ),
            },
        }

        # Apply security globally (will be overridden for public endpoints)
        openapi_schema["security"] = [{"SessionCookie": []}]

        # Remove security from public endpoints
        public_endpoints = {
            ("POST", "/login"),
            ("POST", "/register"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    # Mark as public endpoint (no security required)
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid login credentials", "type": "auth_error"},
                {"message": "Todo not found", "type": "not_found"},
                {"message": "Invalid ID format", "type": "validation_error"},
            ]
        }
    }
