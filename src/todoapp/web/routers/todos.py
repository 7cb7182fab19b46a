from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from todoapp.core.modules.todo.models import Todo, TodoList, TodoStatus, TodoUpdate
from todoapp.web.deps import AppDep, ServicesDep
from todoapp.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["todos"])


class CreateTodoRequest(BaseModel):
    """Request to create a new todo."""

    title: str = Field(
        ...,
        description="Todo title, 1-500 characters after trimming. HTML tags are stripped; script-like input is rejected.",
    )

    model_config = {"json_schema_extra": {"examples": [{"title": "Buy milk"}]}}


class ToggleTodoRequest(BaseModel):
    """Request to set the completion flag of a todo."""

    completed: bool = Field(..., description="New completion flag")


@router.get(
    "/todos",
    summary="List todos",
    description="Get the current user's todos, newest first, with counts per status.",
    operation_id="listTodos",
    responses={
        200: {"description": "Todos of the current user"},
        307: {"description": "No session, redirected to /login"},
    },
)
async def list_todos(
    app: AppDep,
    services: ServicesDep,
    status: Annotated[TodoStatus, Query(description="Only return todos with this status")] = TodoStatus.ALL,
) -> TodoList:
    return await app.get_todos(services, status)


@router.post(
    "/todos",
    summary="Create todo",
    description="Create a new, not yet completed todo for the current user.",
    operation_id="createTodo",
    status_code=201,
    responses={
        201: {"description": "Todo created"},
        307: {"description": "No session, redirected to /login"},
        400: {"model": ErrorResponse, "description": "Invalid title"},
    },
)
async def create_todo(request: CreateTodoRequest, app: AppDep, services: ServicesDep) -> Todo:
    return await app.create_todo(services, request.title)


@router.patch(
    "/todos/{todo_id}",
    summary="Update todo",
    description="Partially update a todo. Only the fields provided are changed.",
    operation_id="updateTodo",
    responses={
        200: {"description": "Todo updated"},
        307: {"description": "No session, redirected to /login"},
        400: {"model": ErrorResponse, "description": "Invalid ID or title"},
        404: {"model": ErrorResponse, "description": "Todo not found"},
    },
)
async def update_todo(todo_id: str, request: TodoUpdate, app: AppDep, services: ServicesDep) -> Todo:
    return await app.update_todo(services, todo_id, request)


@router.post(
    "/todos/{todo_id}/toggle",
    summary="Set todo completion",
    description="Mark a todo as completed or not completed.",
    operation_id="toggleTodo",
    responses={
        200: {"description": "Todo updated"},
        307: {"description": "No session, redirected to /login"},
        400: {"model": ErrorResponse, "description": "Invalid ID"},
        404: {"model": ErrorResponse, "description": "Todo not found"},
    },
)
async def toggle_todo(todo_id: str, request: ToggleTodoRequest, app: AppDep, services: ServicesDep) -> Todo:
    return await app.toggle_todo(services, todo_id, request.completed)


@router.delete(
    "/todos/{todo_id}",
    summary="Delete todo",
    description="Delete a todo. Deleting a todo that does not exist (or is not yours) succeeds without effect.",
    operation_id="deleteTodo",
    status_code=204,
    responses={
        204: {"description": "Todo deleted"},
        307: {"description": "No session, redirected to /login"},
        400: {"model": ErrorResponse, "description": "Invalid ID"},
    },
)
async def delete_todo(todo_id: str, app: AppDep, services: ServicesDep) -> None:
    await app.delete_todo(services, todo_id)
