from pydantic import field_validator
from pydantic_settings import BaseSettings

from todoapp.core.validation import require_value, validate_supabase_key, validate_supabase_url


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    supabase_url: str  # Base URL of the hosted backend, e.g. https://<ref>.supabase.co
    supabase_anon_key: str  # Public (anon) API key of the hosted backend
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    cookie_secure: bool = True  # Disable only for local development over plain HTTP
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "TODOAPP_",
        "extra": "ignore",
    }

    @field_validator("supabase_url")
    @classmethod
    def check_supabase_url(cls, value: str) -> str:
        value = require_value("TODOAPP_SUPABASE_URL", value)
        validate_supabase_url(value, "TODOAPP_SUPABASE_URL")
        return value

    @field_validator("supabase_anon_key")
    @classmethod
    def check_supabase_anon_key(cls, value: str) -> str:
        value = require_value("TODOAPP_SUPABASE_ANON_KEY", value)
        validate_supabase_key(value, "TODOAPP_SUPABASE_ANON_KEY")
        return value
