from typing import Any

import structlog
from supabase import AsyncClient
from supabase_auth.errors import AuthError, AuthSessionMissingError
from supabase_auth.types import Session

from todoapp.core.backend import CookieStorage
from todoapp.core.core import Service
from todoapp.core.modules.auth.models import AuthResult, User
from todoapp.errors import AuthenticationError

logger = structlog.get_logger(__name__)


class AuthService(Service):
    """Wraps the auth provider. Provider errors propagate unchanged."""

    def __init__(self, client: AsyncClient, storage: CookieStorage) -> None:
        super().__init__(client, storage)
        self.session: Session | None = None

    async def restore_session(self) -> Session | None:
        """Load the session persisted in cookies, refreshing it if expired.

        A session the provider refuses to refresh counts as no session: its
        cookies are deleted so later requests do not retry it.
        """
        try:
            session = await self.client.auth.get_session()
        except AuthError as e:
            logger.warning("session_restore_failed", error=str(e))
            self.storage.discard_served()
            session = None
        self._use_session(session)
        return session

    @property
    def has_session(self) -> bool:
        return self.session is not None

    async def sign_up(self, email: str, password: str) -> AuthResult:
        response = await self.client.auth.sign_up({"email": email, "password": password})
        return self._auth_result(response)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        response = await self.client.auth.sign_in_with_password({"email": email, "password": password})
        return self._auth_result(response)

    async def sign_out(self) -> None:
        await self.client.auth.sign_out()
        self._use_session(None)

    async def get_current_user(self) -> User | None:
        """Return the signed-in user, or None when there is no session or the provider rejects it."""
        try:
            response = await self.client.auth.get_user()
        except AuthSessionMissingError:
            return None
        except AuthError as e:
            logger.warning("current_user_lookup_failed", error=str(e))
            return None
        if response is None or response.user is None:
            return None
        return User.from_provider(response.user)

    def _auth_result(self, response: Any) -> AuthResult:
        if response.user is None:
            raise AuthenticationError("Authentication provider returned no user")
        self._use_session(response.session)
        user = User.from_provider(response.user)
        logger.debug("auth_session_issued", user_id=str(user.id), has_session=response.session is not None)
        return AuthResult(user=user, confirmation_required=response.session is None)

    def _use_session(self, session: Session | None) -> None:
        # Table queries must carry the user's token for row-level policies to apply
        self.session = session
        if session is not None:
            self.client.postgrest.auth(session.access_token)
