"""ezkit settings (Pydantic v2, ``EZKIT_*`` environment variables)."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

KEY_HEX_LENGTH = 64  # 32 bytes, AES-256
IV_HEX_LENGTH = 32  # 16 bytes, one AES block


def normalize_log_format(value: str, *, env_var: str = "EZKIT_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str, *, env_var: str = "EZKIT_LOG_LEVEL") -> str:
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def _check_hex(value: SecretStr | None, *, length: int, env_var: str) -> SecretStr | None:
    if value is None:
        return None
    raw = value.get_secret_value().strip()
    if not raw:
        return None
    try:
        bytes.fromhex(raw)
    except ValueError as exc:
        raise ValueError(f"{env_var} must be hex encoded.") from exc
    if len(raw) != length:
        raise ValueError(f"{env_var} must be {length} hex characters.")
    return SecretStr(raw.lower())


class Settings(BaseSettings):
    """Runtime configuration loaded from ``EZKIT_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EZKIT_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # Authorization
    auth_timeout_seconds: float | None = Field(default=None, gt=0)

    # Security
    security_key: SecretStr | None = None
    security_iv: SecretStr | None = None

    # ---- Validators ----

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if value is None:
            return "INFO"
        return normalize_log_level(str(value))

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> object:
        if value is None:
            return "console"
        return normalize_log_format(str(value))

    @field_validator("security_key")
    @classmethod
    def _validate_security_key(cls, value: SecretStr | None) -> SecretStr | None:
        return _check_hex(value, length=KEY_HEX_LENGTH, env_var="EZKIT_SECURITY_KEY")

    @field_validator("security_iv")
    @classmethod
    def _validate_security_iv(cls, value: SecretStr | None) -> SecretStr | None:
        return _check_hex(value, length=IV_HEX_LENGTH, env_var="EZKIT_SECURITY_IV")


@lru_cache(maxsize=1)
def _build() -> Settings:
    return Settings()


def get_settings() -> Settings:
    """Return the cached process settings."""

    return _build()


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""

    _build.cache_clear()
    return _build()


__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "Settings",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "reload_settings",
]
