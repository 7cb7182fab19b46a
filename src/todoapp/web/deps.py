from typing import Annotated, cast

from fastapi import Depends, Request, Response

from todoapp.app import App
from todoapp.core.backend import CookieStorage
from todoapp.core.core import Services


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_services(request: Request, response: Response, app: Annotated[App, Depends(get_app)]) -> Services:
    """Get request-scoped services.

    On gated paths the session gate has already opened them (and restored the
    session); reuse those so a refresh token is never spent twice per request.
    """
    services = getattr(request.state, "services", None)
    if services is not None:
        return cast(Services, services)

    storage = CookieStorage(request.cookies, response, secure=app.config.cookie_secure)
    return await app.connect(storage)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ServicesDep = Annotated[Services, Depends(get_services)]
