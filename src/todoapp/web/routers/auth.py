from fastapi import APIRouter
from pydantic import BaseModel, Field

from todoapp.core.modules.auth.models import AuthResult, User
from todoapp.web.deps import AppDep, ServicesDep
from todoapp.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class CredentialsRequest(BaseModel):
    """Email and password credentials."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "ada@example.com", "password": "Correct-Horse-42"}],
        }
    }


@router.post(
    "/register",
    summary="Register account",
    description=(
        "Create an account with email and password. Passwords must be 12-128 characters and contain "
        "uppercase, lowercase, digit and special characters. Signed-in users are redirected to `/todos`."
    ),
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        307: {"description": "Already signed in, redirected to /todos"},
        400: {"model": ErrorResponse, "description": "Invalid email or weak password, or rejected by the provider"},
    },
)
async def register(request: CredentialsRequest, app: AppDep, services: ServicesDep) -> AuthResult:
    return await app.register(services, request.email, request.password)


@router.post(
    "/login",
    summary="Sign in",
    description="Sign in with email and password. The session is stored in HTTP-only cookies.",
    operation_id="login",
    responses={
        200: {"description": "Successfully signed in"},
        307: {"description": "Already signed in, redirected to /todos"},
        400: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(request: CredentialsRequest, app: AppDep, services: ServicesDep) -> AuthResult:
    return await app.login(services, request.email, request.password)


@router.post(
    "/logout",
    summary="Sign out",
    description="End the current session and clear session cookies.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully signed out"},
    },
)
async def logout(app: AppDep, services: ServicesDep) -> None:
    await app.logout(services)


@router.get(
    "/me",
    summary="Get current user",
    description="Get the currently signed-in user.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_me(app: AppDep, services: ServicesDep) -> User:
    return await app.get_current_user(services)
