"""Tests for ServerConfig and the command-line overlay."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from openapi_mcp_server.config import ConfigError, ServerConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "OPENAPI_SPECS_PATH",
        "TRANSPORT_TYPE",
        "HTTP_PORT",
        "HTTP_HOST",
        "ENDPOINT_PATH",
        "SERVER_NAME",
        "SERVER_VERSION",
        "REQUEST_TIMEOUT",
        "MAX_NAME_LENGTH",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestServerConfig:
    def test_defaults(self):
        cfg = ServerConfig()
        assert cfg.server_name == "mcp-openapi-server"
        assert cfg.server_version == "1.0.0"
        assert cfg.specs_directory is None
        assert cfg.transport_type == "stdio"
        assert cfg.http_host == "127.0.0.1"
        assert cfg.http_port == 3000
        assert cfg.endpoint_path == "/mcp"
        assert cfg.request_timeout == 30.0
        assert cfg.max_name_length == 64

    def test_env_var_loading(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_SPECS_PATH", "/srv/specs")
        monkeypatch.setenv("TRANSPORT_TYPE", "http")
        monkeypatch.setenv("HTTP_PORT", "8080")
        cfg = ServerConfig()
        assert cfg.specs_directory == Path("/srv/specs")
        assert cfg.transport_type == "http"
        assert cfg.http_port == 8080

    def test_invalid_transport(self):
        with pytest.raises(ValidationError):
            ServerConfig(transport_type="websocket")


class TestLoadConfig:
    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_SPECS_PATH", "/from/env")
        monkeypatch.setenv("HTTP_PORT", "8080")
        cfg = load_config(["--specs-dir", "/from/cli", "-t", "http", "-p", "9000"])
        assert cfg.specs_directory == Path("/from/cli")
        assert cfg.transport_type == "http"
        assert cfg.http_port == 9000

    def test_env_used_without_flags(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_SPECS_PATH", "/from/env")
        cfg = load_config([])
        assert cfg.specs_directory == Path("/from/env")

    def test_name_and_version_flags(self):
        cfg = load_config(["-s", "/specs", "-n", "my-server", "-v", "2.0.0"])
        assert cfg.server_name == "my-server"
        assert cfg.server_version == "2.0.0"

    def test_missing_specs_directory(self):
        with pytest.raises(ConfigError, match="specs directory is required"):
            load_config([])

    def test_invalid_env_value_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "abc")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(["-s", "/specs"])
