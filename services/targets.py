"""Upstream target catalog and registry construction."""

from collections.abc import Callable
from dataclasses import dataclass

from core.config import Config
from core.registry import CredentialLocation, ServiceEntry, ServiceRegistry


@dataclass(frozen=True)
class TargetSpec:
    """Static description of a known upstream service."""

    name: str
    credential_field: str
    base_url: str
    credential_location: CredentialLocation
    credential_key: str
    extra_headers: tuple[tuple[str, str], ...] = ()

    @property
    def env_var(self) -> str:
        return self.credential_field.upper()


TARGETS: tuple[TargetSpec, ...] = (
    TargetSpec(
        name="anthropic",
        credential_field="anthropic_api_key",
        base_url="https://api.anthropic.com/v1",
        credential_location=CredentialLocation.HEADER,
        credential_key="x-api-key",
        extra_headers=(("anthropic-version", "2023-06-01"),),
    ),
    TargetSpec(
        name="openai",
        credential_field="openai_api_key",
        base_url="https://api.openai.com/v1",
        credential_location=CredentialLocation.HEADER,
        credential_key="Authorization",
    ),
    TargetSpec(
        name="gemini",
        credential_field="google_gemini_api_key",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        credential_location=CredentialLocation.QUERY,
        credential_key="key",
    ),
    TargetSpec(
        name="elevenlabs",
        credential_field="elevenlabs_api_key",
        base_url="https://api.elevenlabs.io/v1",
        credential_location=CredentialLocation.HEADER,
        credential_key="xi-api-key",
    ),
    TargetSpec(
        name="glm",
        credential_field="zai_glm_api_key",
        base_url="https://open.bigmodel.cn/api/paas/v4",
        credential_location=CredentialLocation.HEADER,
        credential_key="Authorization",
    ),
    TargetSpec(
        name="resend",
        credential_field="resend_api_key",
        base_url="https://api.resend.com",
        credential_location=CredentialLocation.HEADER,
        credential_key="Authorization",
    ),
    TargetSpec(
        name="googlemaps",
        credential_field="google_maps_api_key",
        base_url="https://maps.googleapis.com/maps/api",
        credential_location=CredentialLocation.QUERY,
        credential_key="key",
    ),
    TargetSpec(
        name="supabase",
        credential_field="supabase_service_role_key",
        # Resolved from SUPABASE_URL at startup
        base_url="",
        credential_location=CredentialLocation.HEADER,
        credential_key="Authorization",
    ),
)


def resolve_base_url(target: TargetSpec, config: Config) -> str:
    if target.name == "supabase":
        return config.credentials.supabase_url.strip()
    return target.base_url


def build_registry(
    config: Config,
    warn: Callable[[str], None] | None = None,
) -> ServiceRegistry:
    """Register every target whose credential is configured."""
    entries = []
    for target in TARGETS:
        credential = config.credentials.secret(target.credential_field)
        if not credential:
            continue
        base_url = resolve_base_url(target, config)
        if not base_url:
            if warn:
                warn(f"{target.env_var} is set but {target.name} has no base URL; skipping")
            continue
        entries.append(
            ServiceEntry(
                name=target.name,
                base_url=base_url,
                credential_location=target.credential_location,
                credential_key=target.credential_key,
                credential_value=credential,
                extra_headers=target.extra_headers,
            )
        )
    return ServiceRegistry(entries)
