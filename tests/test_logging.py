"""Tests for log files, console logging, the dashboard and credential status."""

import io
import json

import pytest
from rich.console import Console

from auth import credential_rows, print_credential_status
from core.config import load_config
from core.redact import Redactor
from ui import log_utils
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard


@pytest.fixture
def cli_log(tmp_path, monkeypatch):
    path = tmp_path / "proxy.log"
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", path)
    return path


def test_write_cli_log_format(cli_log):
    log_utils.write_cli_log("PROXY", "https://api.example.com/v1/x", service="openai")
    line = cli_log.read_text()
    assert "] PROXY: https://api.example.com/v1/x service=openai" in line
    assert line.endswith("\n")


def test_incoming_log_redacts_headers_and_body(tmp_path):
    redactor = Redactor(["topsecretvalue"])
    path = log_utils.write_incoming_log(
        "openai",
        "POST",
        "/api/proxy/openai",
        {"authorization": "Bearer client-token-123456", "user-agent": "ua"},
        {"endpoint": "x", "body": {"note": "topsecretvalue"}},
        redactor,
        log_root=tmp_path,
    )
    assert path.parent == tmp_path / "incoming" / "openai"
    payload = json.loads(path.read_text())
    assert payload["headers"]["authorization"] == "Bearer...3456"
    assert payload["headers"]["user-agent"] == "ua"
    assert payload["body"]["body"]["note"] == "***"


def test_incoming_log_folder_name_is_sanitized(tmp_path):
    path = log_utils.write_incoming_log("../etc", "POST", "/", {}, {}, Redactor(), log_root=tmp_path)
    assert path.parent == tmp_path / "incoming" / "etc"


def test_clear_logs(tmp_path):
    (tmp_path / "incoming").mkdir()
    (tmp_path / "proxy.log").write_text("old")
    log_utils.clear_logs(tmp_path)
    assert not tmp_path.exists()


def test_console_logger(cli_log):
    out = io.StringIO()
    logger = ConsoleLogger(Console(file=out, width=200))
    logger.log_request("GET", "/health", "127.0.0.1", "curl/8.0")
    logger.log_proxy("openai", "GET", "https://api.openai.com/v1/models")
    logger.log_error("openai", 401, "bad key")
    text = out.getvalue()
    assert "GET /health - IP: 127.0.0.1 - UA: curl/8.0" in text
    assert "openai GET https://api.openai.com/v1/models" in text
    assert "openai 401: bad key" in text
    assert cli_log.read_text().count("\n") == 3


def test_dashboard_counts(cli_log):
    config = load_config({})
    dashboard = Dashboard(config, ["openai", "gemini"])
    dashboard.log_request("POST", "/api/proxy/openai", "127.0.0.1", "ua")
    dashboard.log_proxy("openai", "POST", "https://api.openai.com/v1/chat/completions")
    dashboard.log_error("gemini", None, "Upstream timeout contacting gemini")
    assert dashboard._request_count == 1
    assert dashboard._service_count == {"openai": 1, "gemini": 0}
    assert dashboard._errors == ["gemini -: Upstream timeout contacting gemini"]
    # Renders without a live display
    Console(file=io.StringIO(), width=120).print(dashboard._build_layout())


def test_credential_rows():
    config = load_config(
        {
            "OPENAI_API_KEY": "sk-abcdefghijklmnop",
            "SUPABASE_SERVICE_ROLE_KEY": "service-role-key-123",
        }
    )
    rows = {name: (state, preview) for name, _, state, preview in credential_rows(config)}
    assert rows["openai"] == ("configured", "sk-abc...mnop")
    assert rows["supabase"] == ("no base URL", "servic...-123")
    assert rows["gemini"] == ("missing", "")


def test_print_credential_status_reports_usable(monkeypatch):
    import auth

    monkeypatch.setattr(auth, "console", Console(file=io.StringIO(), width=120))
    assert print_credential_status(load_config({"RESEND_API_KEY": "re_1234567890abc"})) is True
    assert print_credential_status(load_config({})) is False
