from todoapp.web.routers.auth import router as auth_router
from todoapp.web.routers.todos import router as todos_router

__all__ = [
    "auth_router",
    "todos_router",
]
