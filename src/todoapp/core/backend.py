"""Supabase client initialization and cookie-backed session storage."""

import base64
from collections.abc import Mapping

import structlog
from starlette.responses import Response
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions
from supabase_auth import AsyncSupportedStorage

from todoapp.config import Config

logger = structlog.get_logger(__name__)

BASE64_PREFIX = "base64-"
CHUNK_SIZE = 3180  # Keeps each Set-Cookie header under the 4096-byte browser limit
COOKIE_MAX_AGE = 30 * 24 * 60 * 60  # 30 days, matches the provider's refresh token lifetime


def encode_cookie_value(value: str) -> str:
    """Encode a session value as unpadded base64url so it is a legal cookie value."""
    encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")
    return BASE64_PREFIX + encoded


def decode_cookie_value(raw: str) -> str | None:
    """Decode a value written by encode_cookie_value. Plain values pass through unchanged."""
    if not raw.startswith(BASE64_PREFIX):
        return raw
    payload = raw.removeprefix(BASE64_PREFIX)
    try:
        return base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)).decode("utf-8")
    except ValueError:
        logger.warning("session_cookie_malformed", length=len(raw))
        return None


def split_chunks(value: str, size: int = CHUNK_SIZE) -> list[str]:
    return [value[i : i + size] for i in range(0, len(value), size)] or [""]


class CookieStorage(AsyncSupportedStorage):
    """Session storage for the auth client backed by HTTP cookies.

    Reads come from the incoming request cookies (plus anything written during
    this request). Writes and removals are emitted as Set-Cookie headers on
    `response`. Values too large for one cookie are split into `<key>.0`,
    `<key>.1`, ... chunks.
    """

    def __init__(self, cookies: Mapping[str, str], response: Response, *, secure: bool = True) -> None:
        self._cookies = dict(cookies)
        self._response = response
        self._secure = secure
        self._served: set[str] = set()

    async def get_item(self, key: str) -> str | None:
        raw = self._read(key)
        if raw is None:
            return None
        self._served.add(key)
        return decode_cookie_value(raw)

    async def set_item(self, key: str, value: str) -> None:
        chunks = split_chunks(encode_cookie_value(value))
        if len(chunks) == 1:
            written = {key: chunks[0]}
        else:
            written = {f"{key}.{index}": chunk for index, chunk in enumerate(chunks)}

        for name in self._names_for(key) - written.keys():
            self._delete(name)
        for name, chunk in written.items():
            self._write(name, chunk)

    async def remove_item(self, key: str) -> None:
        self._remove(key)

    def discard_served(self) -> None:
        """Delete every session cookie this storage has handed to the auth client."""
        for key in self._served:
            self._remove(key)
        self._served.clear()

    def _read(self, key: str) -> str | None:
        if key in self._cookies:
            return self._cookies[key]

        chunks = []
        while (chunk := self._cookies.get(f"{key}.{len(chunks)}")) is not None:
            chunks.append(chunk)
        return "".join(chunks) if chunks else None

    def _names_for(self, key: str) -> set[str]:
        return {name for name in self._cookies if name == key or name.startswith(f"{key}.")}

    def _remove(self, key: str) -> None:
        for name in self._names_for(key):
            self._delete(name)

    def _write(self, name: str, value: str) -> None:
        self._cookies[name] = value
        self._response.set_cookie(
            key=name,
            value=value,
            max_age=COOKIE_MAX_AGE,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )

    def _delete(self, name: str) -> None:
        self._cookies.pop(name, None)
        self._response.delete_cookie(name, path="/", httponly=True, samesite="lax", secure=self._secure)


class SupabaseBackend:
    """Validated connection settings for the hosted backend.

    Created once at startup from Config. Each request gets its own client
    through `connect`, bound to that request's cookie storage.
    """

    def __init__(self, url: str, anon_key: str) -> None:
        self.url = url
        self.anon_key = anon_key

    @classmethod
    def from_config(cls, config: Config) -> "SupabaseBackend":
        return cls(config.supabase_url, config.supabase_anon_key)

    async def connect(self, storage: CookieStorage) -> AsyncClient:
        """Create a request-scoped client whose auth session lives in `storage`."""
        options = AsyncClientOptions(storage=storage, persist_session=True, auto_refresh_token=False)
        return await acreate_client(self.url, self.anon_key, options=options)
