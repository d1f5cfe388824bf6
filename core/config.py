"""Configuration models and loading."""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from core.exceptions import ConfigurationError

ENV_FILE = Path.cwd() / ".env"

DEFAULT_ORIGINS = ["http://localhost:3000", "app://."]


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    environment: str = "development"
    debug: bool = False
    allowed_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


class LimitSettings(BaseModel):
    window_seconds: int = Field(default=15 * 60, gt=0)
    general_max: int = Field(default=100, gt=0)
    proxy_max: int = Field(default=50, gt=0)
    max_body_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    keep_alive_timeout: int = Field(default=5, gt=0)


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=5 * 60, ge=0)


class UpstreamSettings(BaseModel):
    timeout: float = Field(default=30.0, gt=0)
    max_connections: int = Field(default=100, gt=0)
    max_keepalive_connections: int = Field(default=20, ge=0)


class CredentialSettings(BaseModel):
    """Upstream API keys. Each field is read from the upper-cased env var of the same name."""

    anthropic_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    google_gemini_api_key: SecretStr | None = None
    elevenlabs_api_key: SecretStr | None = None
    zai_glm_api_key: SecretStr | None = None
    resend_api_key: SecretStr | None = None
    google_maps_api_key: SecretStr | None = None
    supabase_service_role_key: SecretStr | None = None
    supabase_url: str = ""

    def secret(self, field: str) -> str:
        """Return the configured value for a key field, or '' when unset."""
        value = getattr(self, field)
        if value is None:
            return ""
        return value.get_secret_value().strip()


class Config(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)


# section -> {field: env var}
ENV_VARS: dict[str, dict[str, str]] = {
    "server": {
        "host": "HOST",
        "port": "PORT",
        "environment": "ENVIRONMENT",
        "debug": "DEBUG",
        "allowed_origins": "ALLOWED_ORIGINS",
    },
    "limits": {
        "window_seconds": "RATE_LIMIT_WINDOW_SECONDS",
        "general_max": "RATE_LIMIT_MAX",
        "proxy_max": "PROXY_RATE_LIMIT_MAX",
        "max_body_bytes": "MAX_BODY_BYTES",
        "keep_alive_timeout": "KEEP_ALIVE_TIMEOUT",
    },
    "cache": {
        "ttl_seconds": "CACHE_TTL_SECONDS",
    },
    "upstream": {
        "timeout": "UPSTREAM_TIMEOUT_SECONDS",
        "max_connections": "UPSTREAM_MAX_CONNECTIONS",
    },
    "credentials": {field: field.upper() for field in CredentialSettings.model_fields},
}

# Secondary names honoured when the primary variable is unset
ENV_FALLBACKS = {
    "ENVIRONMENT": "NODE_ENV",
    "SUPABASE_URL": "NEXT_PUBLIC_SUPABASE_URL",
}


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build configuration from environment variables.

    Unset variables keep their model defaults. Raises ConfigurationError
    naming the offending fields (never their values).
    """
    env = os.environ if environ is None else environ

    data: dict[str, dict[str, str]] = {}
    for section, fields in ENV_VARS.items():
        values = {}
        for field, var in fields.items():
            value = _read(env, var)
            if value is not None:
                values[field] = value
        data[section] = values

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise ConfigurationError(f"Invalid configuration for: {fields}") from None


def _read(env: Mapping[str, str], var: str) -> str | None:
    value = env.get(var)
    if value is None or value == "":
        fallback = ENV_FALLBACKS.get(var)
        value = env.get(fallback) if fallback else None
    if value is None or value == "":
        return None
    return value
