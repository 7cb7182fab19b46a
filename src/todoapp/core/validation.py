"""Validation and sanitization of user-supplied strings and configuration values."""

import os
import re
from typing import NamedTuple
from urllib.parse import urlparse

import structlog

from todoapp.errors import ConfigurationError, ValidationError

logger = structlog.get_logger(__name__)

TODO_TITLE_MIN = 1
TODO_TITLE_MAX = 500
EMAIL_MAX = 254  # RFC 5321
PASSWORD_MIN = 12
PASSWORD_MAX = 128
SUPABASE_KEY_MIN = 20

COMMON_PASSWORDS = frozenset(
    {
        "Password123!",
        "Welcome123!",
        "Qwerty123!",
        "Admin123!",
        "Test1234!",
        "User1234!",
        "Pass1234!",
    }
)

UPPERCASE_RE = re.compile(r"[A-Z]")
LOWERCASE_RE = re.compile(r"[a-z]")
DIGIT_RE = re.compile(r"[0-9]")
SPECIAL_CHAR_RE = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")  # Used with fullmatch
SUSPICIOUS_TITLE_RE = re.compile(r"<script|javascript:|onerror=|onclick=", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"<[^>]*>")
JAVASCRIPT_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)


class ValidationResult(NamedTuple):
    """Outcome of a validation check. `error` is empty when `valid` is true."""

    valid: bool
    error: str = ""


VALID = ValidationResult(valid=True)


def validate_password(password: str) -> ValidationResult:
    """Check password strength.

    Requirements:
    - Between 12 and 128 characters
    - At least one uppercase letter, lowercase letter, digit and special character
    - Not one of the well-known common passwords
    """
    if len(password) < PASSWORD_MIN:
        return ValidationResult(False, f"Password must be at least {PASSWORD_MIN} characters")

    if len(password) > PASSWORD_MAX:
        return ValidationResult(False, f"Password must be less than {PASSWORD_MAX} characters")

    character_classes = (UPPERCASE_RE, LOWERCASE_RE, DIGIT_RE, SPECIAL_CHAR_RE)
    if not all(pattern.search(password) for pattern in character_classes):
        return ValidationResult(False, "Password must contain uppercase, lowercase, number, and special character")

    if password in COMMON_PASSWORDS:
        return ValidationResult(False, "Password is too common. Please choose a stronger password")

    return VALID


def validate_email(email: str) -> ValidationResult:
    """Structural email check (local@domain.tld), not a full RFC 5322 parser."""
    if len(email) > EMAIL_MAX:
        return ValidationResult(False, "Email is too long")

    if not EMAIL_RE.fullmatch(email):
        return ValidationResult(False, "Invalid email format")

    return VALID


def validate_todo_title(title: str) -> ValidationResult:
    trimmed = title.strip()

    if len(trimmed) < TODO_TITLE_MIN:
        return ValidationResult(False, "Todo title cannot be empty")

    if len(trimmed) > TODO_TITLE_MAX:
        return ValidationResult(False, f"Todo title must be less than {TODO_TITLE_MAX} characters")

    # Checked on the raw title: padding must not hide an injection attempt
    if SUSPICIOUS_TITLE_RE.search(title):
        return ValidationResult(False, "Invalid characters in title")

    return VALID


def sanitize_todo_title(title: str) -> str:
    """Strip tag-shaped substrings and the javascript: protocol, then trim and truncate."""
    sanitized = HTML_TAG_RE.sub("", title)
    # Repeated: removing one occurrence can join the halves of another ("javajavascript:script:")
    while JAVASCRIPT_PROTOCOL_RE.search(sanitized):
        sanitized = JAVASCRIPT_PROTOCOL_RE.sub("", sanitized)
    return sanitized.strip()[:TODO_TITLE_MAX]


def is_valid_uuid(value: str) -> bool:
    return bool(UUID_RE.fullmatch(value))


def ensure_valid(result: ValidationResult) -> None:
    """Raise ValidationError with the result's message if the result is invalid."""
    if not result.valid:
        raise ValidationError(result.error)


def require_value(key: str, value: str | None) -> str:
    """Return the configuration value, raising ConfigurationError if it is missing or blank."""
    if value is None or value.strip() == "":
        raise ConfigurationError(f"Missing required environment variable: {key}. Please check your .env file.")
    return value


def get_env_var(key: str) -> str:
    return require_value(key, os.environ.get(key))


def validate_supabase_url(url: str, key: str = "SUPABASE_URL") -> None:
    """Require a well-formed http(s) URL; warn when the host does not look like a Supabase project."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a valid URL") from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise ConfigurationError(f"{key} must be a valid URL")

    if "supabase" not in hostname:
        logger.warning("supabase_url_unrecognized_host", hostname=hostname)


def validate_supabase_key(value: str, key: str = "SUPABASE_ANON_KEY") -> None:
    if len(value) < SUPABASE_KEY_MIN:
        raise ConfigurationError(f"{key} appears to be invalid (too short)")
