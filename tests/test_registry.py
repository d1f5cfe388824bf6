"""Tests for the service catalog and registry."""

import pytest

from core.config import load_config
from core.exceptions import UnknownService
from core.registry import CredentialLocation, ServiceEntry, ServiceRegistry
from services.targets import TARGETS, build_registry
from tests.conftest import ANTHROPIC_KEY, GEMINI_KEY, OPENAI_KEY


def test_only_configured_services_are_registered(registry):
    assert registry.list_services() == ["anthropic", "openai", "gemini"]
    assert "resend" not in registry
    assert registry.get("resend") is None


def test_every_target_registers_when_keys_present():
    env = {target.env_var: f"value-for-{target.name}" for target in TARGETS}
    env["SUPABASE_URL"] = "https://project.supabase.co"
    registry = build_registry(load_config(env))
    assert registry.list_services() == [target.name for target in TARGETS]


def test_blank_credential_is_not_configured():
    registry = build_registry(load_config({"OPENAI_API_KEY": "   "}))
    assert registry.list_services() == []


def test_supabase_needs_base_url():
    warnings = []
    registry = build_registry(
        load_config({"SUPABASE_SERVICE_ROLE_KEY": "service-role"}),
        warn=warnings.append,
    )
    assert "supabase" not in registry
    assert len(warnings) == 1
    assert "service-role" not in warnings[0]


def test_supabase_url_fallback_variable():
    registry = build_registry(
        load_config(
            {
                "SUPABASE_SERVICE_ROLE_KEY": "service-role",
                "NEXT_PUBLIC_SUPABASE_URL": "https://project.supabase.co",
            }
        )
    )
    assert registry.lookup("supabase").base_url == "https://project.supabase.co"


def test_entries_carry_their_own_credentials(registry):
    assert registry.lookup("openai").credential_value == OPENAI_KEY
    assert registry.lookup("gemini").credential_value == GEMINI_KEY
    assert registry.lookup("anthropic").credential_value == ANTHROPIC_KEY


def test_credential_locations(registry):
    assert registry.lookup("openai").credential_location is CredentialLocation.HEADER
    assert registry.lookup("gemini").credential_location is CredentialLocation.QUERY
    assert registry.lookup("anthropic").credential_key == "x-api-key"
    assert ("anthropic-version", "2023-06-01") in registry.lookup("anthropic").extra_headers


def test_lookup_unknown_lists_available(registry):
    with pytest.raises(UnknownService) as exc_info:
        registry.lookup("nope")
    assert exc_info.value.available == ["anthropic", "openai", "gemini"]
    assert "anthropic, openai, gemini" in str(exc_info.value)


def test_secrets(registry):
    assert sorted(registry.secrets()) == sorted([OPENAI_KEY, GEMINI_KEY, ANTHROPIC_KEY])


def test_entry_repr_hides_credential(registry):
    assert OPENAI_KEY not in repr(registry.lookup("openai"))


def test_entry_requires_credential():
    with pytest.raises(ValueError):
        ServiceEntry("x", "https://x", CredentialLocation.HEADER, "k", "")


def test_duplicate_names_rejected():
    entry = ServiceEntry("x", "https://x", CredentialLocation.HEADER, "k", "v")
    with pytest.raises(ValueError):
        ServiceRegistry([entry, entry])


def test_entries_are_immutable(registry):
    entry = registry.lookup("openai")
    with pytest.raises(AttributeError):
        entry.credential_value = "other"
