"""Discovery module: OpenAPI documents to callable MCP tools."""

from .abbreviations import DEFAULT_TABLES, AbbreviationTables
from .compression import compress
from .dispatcher import Dispatcher, MissingParameterError
from .loader import SpecLoadError, load_provider_bundles
from .openapi_parser import (
    ParamSpec,
    ProviderBundle,
    ProviderConfigError,
    ToolDescriptor,
    build_tool_id,
    synthesize,
)
from .tool_registry import ToolRegistry

__all__ = [
    "AbbreviationTables",
    "DEFAULT_TABLES",
    "compress",
    "Dispatcher",
    "MissingParameterError",
    "SpecLoadError",
    "load_provider_bundles",
    "ParamSpec",
    "ProviderBundle",
    "ProviderConfigError",
    "ToolDescriptor",
    "build_tool_id",
    "synthesize",
    "ToolRegistry",
]
