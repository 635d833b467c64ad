"""
Runtime Configuration for PathWise Coach.

All settings are read from environment variables once, at startup, into an
immutable ``Settings`` object.

Variables:
- PATHWISE_BACKEND_URL: Base URL of the PathWise REST backend (goals, AI chat)
- PATHWISE_HTTP_TIMEOUT: Seconds before an outgoing HTTP call is abandoned
- PATHWISE_TRANSCRIPT_LIMIT: Number of transcript entries kept per session
- PATHWISE_WIZARD_TTL: Seconds an idle goal wizard survives in the state store
- PATHWISE_CURRENCY: The single supported goal currency
- PATHWISE_CORS_ORIGINS: Comma-separated list of allowed origins
- PATHWISE_ENVIRONMENT: "development" or "production"
- PATHWISE_HOST / PATHWISE_PORT: Bind address for uvicorn
- PATHWISE_DEV_MODE: "1" enables reload and console logging
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from pathwise.lib.exceptions import ConfigurationError

DEFAULT_BACKEND_URL = "http://localhost:8080"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_TRANSCRIPT_LIMIT = 60
DEFAULT_WIZARD_TTL = 3600
DEFAULT_CURRENCY = "BHD"


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Immutable application settings.

    Attributes:
        backend_url: Base URL of the remote PathWise backend
        http_timeout: Timeout in seconds for outgoing HTTP calls
        transcript_limit: Max transcript entries kept per session
        wizard_ttl: Seconds of inactivity after which a wizard draft expires
        currency: Goal currency code
        cors_origins: Allowed CORS origins
        environment: Deployment environment name
        dev_mode: Development mode flag
        host: Bind host
        port: Bind port
    """

    backend_url: str = DEFAULT_BACKEND_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    transcript_limit: int = DEFAULT_TRANSCRIPT_LIMIT
    wizard_ttl: int = DEFAULT_WIZARD_TTL
    currency: str = DEFAULT_CURRENCY
    cors_origins: tuple[str, ...] = field(default_factory=tuple)
    environment: str = "development"
    dev_mode: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a value is malformed
        """
        env = os.environ if env is None else env

        backend_url = env.get("PATHWISE_BACKEND_URL", DEFAULT_BACKEND_URL).strip().rstrip("/")
        if not backend_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"PATHWISE_BACKEND_URL must be an http(s) URL, got {backend_url!r}"
            )

        environment = env.get("PATHWISE_ENVIRONMENT", "development").strip() or "development"
        cors_origins = tuple(
            origin.strip()
            for origin in env.get("PATHWISE_CORS_ORIGINS", "").split(",")
            if origin.strip()
        )
        if environment == "production" and "*" in cors_origins:
            raise ConfigurationError(
                "PATHWISE_CORS_ORIGINS contains wildcard '*' which is forbidden in production."
            )

        currency = env.get("PATHWISE_CURRENCY", DEFAULT_CURRENCY).strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ConfigurationError(f"PATHWISE_CURRENCY must be an ISO 4217 code, got {currency!r}")

        return cls(
            backend_url=backend_url,
            http_timeout=_read_float(env, "PATHWISE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            transcript_limit=_read_int(env, "PATHWISE_TRANSCRIPT_LIMIT", DEFAULT_TRANSCRIPT_LIMIT),
            wizard_ttl=_read_int(env, "PATHWISE_WIZARD_TTL", DEFAULT_WIZARD_TTL),
            currency=currency,
            cors_origins=cors_origins,
            environment=environment,
            dev_mode=env.get("PATHWISE_DEV_MODE", "0") == "1",
            host=env.get("PATHWISE_HOST", "0.0.0.0"),
            port=_read_int(env, "PATHWISE_PORT", 8000),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Replace the settings singleton (tests, embedding applications)."""
    global _settings
    _settings = settings
