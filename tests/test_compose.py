"""Tests for upstream URL composition."""

from urllib.parse import parse_qsl, urlsplit

import pytest

from core.compose import compose_url
from core.exceptions import EndpointOutsideBase, ValidationError
from core.registry import CredentialLocation

BASE = "https://api.example.com/v1"


def test_header_credential_never_reaches_url():
    url = compose_url(BASE, "/v1/x", {"a": "1"}, "key", "secret", CredentialLocation.HEADER)
    assert "secret" not in url
    assert url == "https://api.example.com/v1/v1/x?a=1"


def test_query_credential_is_appended():
    url = compose_url(BASE, "/v1/x", {}, "key", "secret", CredentialLocation.QUERY)
    assert "key=secret" in url


def test_base_path_is_retained():
    url = compose_url(BASE, "chat/completions", None, "k", "v", CredentialLocation.HEADER)
    assert url == "https://api.example.com/v1/chat/completions"


def test_base_with_trailing_slash():
    url = compose_url(BASE + "/", "/models", None, "k", "v", CredentialLocation.HEADER)
    assert url == "https://api.example.com/v1/models"


def test_only_one_leading_slash_is_stripped():
    url = compose_url(BASE, "//evil.example/steal", None, "k", "v", CredentialLocation.HEADER)
    assert urlsplit(url).netloc == "api.example.com"


@pytest.mark.parametrize(
    "endpoint",
    [
        "https://evil.example/steal",
        "http://evil.example:8080/steal?x=1",
        "//evil.example/steal",
    ],
)
def test_absolute_endpoint_stays_on_service_authority(endpoint):
    url = compose_url(BASE, endpoint, None, "k", "v", CredentialLocation.HEADER)
    parts = urlsplit(url)
    assert parts.scheme == "https"
    assert parts.netloc == "api.example.com"
    assert parts.path.startswith("/v1/")


def test_absolute_endpoint_keeps_its_path():
    url = compose_url(BASE, "https://evil.example/steal", None, "k", "v", CredentialLocation.HEADER)
    assert url == "https://api.example.com/v1/steal"


def test_colon_in_first_segment_is_not_a_scheme():
    url = compose_url(
        "https://generativelanguage.googleapis.com/v1beta",
        "gemini-pro:generateContent",
        None,
        "key",
        "abc",
        CredentialLocation.QUERY,
    )
    assert url == "https://generativelanguage.googleapis.com/v1beta/gemini-pro:generateContent?key=abc"


def test_existing_query_is_merged_with_params_in_order():
    url = compose_url(BASE, "search?q=cats&limit=5", {"q": "dogs"}, "key", "s", CredentialLocation.QUERY)
    assert parse_qsl(urlsplit(url).query) == [("q", "cats"), ("limit", "5"), ("q", "dogs"), ("key", "s")]


def test_params_are_encoded():
    url = compose_url(BASE, "search", {"q": "a b&c"}, "k", "v", CredentialLocation.HEADER)
    assert parse_qsl(urlsplit(url).query) == [("q", "a b&c")]


def test_fragment_is_dropped():
    url = compose_url(BASE, "models#frag", None, "k", "v", CredentialLocation.HEADER)
    assert "#" not in url


@pytest.mark.parametrize(
    "endpoint",
    [
        "../admin/keys",
        "../../../evil.example/steal",
        "models/../../admin",
        "..",
        "%2e%2e/admin",
        "%2E%2E/%2e%2e/admin",
    ],
)
def test_dot_segments_cannot_leave_base_path(endpoint):
    with pytest.raises(EndpointOutsideBase) as excinfo:
        compose_url(BASE, endpoint, None, "k", "v", CredentialLocation.HEADER)
    assert isinstance(excinfo.value, ValidationError)


def test_dot_segments_inside_base_path_are_resolved():
    url = compose_url(BASE, "models/../files", None, "k", "v", CredentialLocation.HEADER)
    assert url == "https://api.example.com/v1/files"


def test_root_base_path_accepts_any_endpoint():
    url = compose_url("https://api.resend.com", "emails", None, "k", "v", CredentialLocation.HEADER)
    assert url == "https://api.resend.com/emails"
