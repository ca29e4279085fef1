"""Server configuration from environment variables and command-line flags."""

import argparse
from pathlib import Path
from typing import Literal, Optional, Sequence

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings


class ConfigError(Exception):
    """Server configuration is missing or inconsistent."""


class ServerConfig(BaseSettings):
    """Configuration for the OpenAPI MCP server."""

    server_name: str = Field(default="mcp-openapi-server", description="Server name")
    server_version: str = Field(default="1.0.0", description="Server version")
    specs_directory: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("specs_directory", "openapi_specs_path"),
        description="Directory containing one sub-directory per provider",
    )
    transport_type: Literal["stdio", "http"] = Field(
        default="stdio", description="Transport type (stdio or http)"
    )
    http_host: str = Field(default="127.0.0.1", description="HTTP host")
    http_port: int = Field(default=3000, ge=1, le=65535, description="HTTP port")
    endpoint_path: str = Field(default="/mcp", description="HTTP endpoint path")
    request_timeout: Optional[float] = Field(
        default=30.0, gt=0, description="Per-request timeout in seconds"
    )
    max_name_length: int = Field(
        default=64, ge=8, description="Maximum length of a compressed tool name"
    )
    log_level: str = Field(default="INFO", description="Log level")

    model_config = {"case_sensitive": False, "populate_by_name": True}


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-mcp-server",
        description="Expose OpenAPI-described REST APIs as MCP tools",
    )
    parser.add_argument(
        "-t", "--transport", choices=["stdio", "http"], help="Transport type to use"
    )
    parser.add_argument("-p", "--port", type=int, help="HTTP port for HTTP transport")
    parser.add_argument("--host", help="HTTP host for HTTP transport")
    parser.add_argument("--path", help="HTTP endpoint path for HTTP transport")
    parser.add_argument(
        "-s", "--specs-dir", help="Path to directory containing OpenAPI specifications"
    )
    parser.add_argument("-n", "--name", help="Server name")
    parser.add_argument("-v", "--version", help="Server version")
    return parser


# CLI destination -> ServerConfig field
_CLI_FIELDS = {
    "transport": "transport_type",
    "port": "http_port",
    "host": "http_host",
    "path": "endpoint_path",
    "specs_dir": "specs_directory",
    "name": "server_name",
    "version": "server_version",
}


def load_config(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """Read env vars, then let command-line flags take precedence."""
    args = build_arg_parser().parse_args(argv)
    overrides = {
        field: getattr(args, dest)
        for dest, field in _CLI_FIELDS.items()
        if getattr(args, dest) is not None
    }
    try:
        config = ServerConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    if config.specs_directory is None:
        raise ConfigError(
            "OpenAPI specs directory is required (--specs-dir or OPENAPI_SPECS_PATH)"
        )
    return config
