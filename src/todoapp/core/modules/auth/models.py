from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, Field


class User(BaseModel):
    """Account held by the auth provider (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str | None = Field(None, description="Email address")

    @classmethod
    def from_provider(cls, user: Any) -> Self:
        """Create from the auth provider's user object."""
        return cls(id=user.id, email=user.email)


class AuthResult(BaseModel):
    """Outcome of sign-up or sign-in."""

    user: User = Field(..., description="Authenticated or newly registered user")
    confirmation_required: bool = Field(
        False, description="True when the provider issued no session yet, e.g. pending email confirmation"
    )
