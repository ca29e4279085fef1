"""Convert a parsed OpenAPI document into ToolDescriptor objects."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import structlog
from mcp.types import Tool

from .abbreviations import DEFAULT_TABLES, AbbreviationTables
from .compression import DEFAULT_MAX_LENGTH, compress

logger = structlog.get_logger(__name__)

HTTP_METHODS: frozenset[str] = frozenset(
    {"get", "post", "put", "patch", "delete", "options", "head"}
)

# Parameter locations a tool call can bind; cookies are never sent.
PARAM_LOCATIONS: frozenset[str] = frozenset({"path", "query", "header"})

_PATH_PLACEHOLDER = re.compile(r"\{([^}]+)\}")
_TOOL_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9-]")
_SERVER_VARIABLE = re.compile(r"\{(\w+)\}")


class ProviderConfigError(Exception):
    """A provider cannot be turned into tools at all (e.g. no base URL)."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


@dataclass
class ProviderBundle:
    """One provider's parsed OpenAPI document plus call settings."""

    name: str
    document: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    base_url: str | None = None


@dataclass
class ParamSpec:
    """Where and how a single tool argument is bound into the request."""

    name: str
    location: str  # path, query or header
    required: bool = False
    type: str = "string"
    description: str = ""


@dataclass
class ToolDescriptor:
    """A callable tool backed by one (method, path) of one provider."""

    tool_id: str
    name: str
    description: str
    method: str  # get, post, …
    path: str  # /users/{id}
    base_url: str
    provider: str
    headers: dict[str, str] = field(default_factory=dict)
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    params: dict[str, ParamSpec] = field(default_factory=dict)

    def to_mcp_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------


def build_tool_id(method: str, path: str) -> str:
    """Build ``METHOD-path-segments`` from a method and path template.

    ``build_tool_id("get", "/users/{id}/posts") == "GET-users-id-posts"``
    """
    clean_path = _PATH_PLACEHOLDER.sub(r"\1", path.removeprefix("/"))
    return _TOOL_ID_UNSAFE.sub("-", f"{method.upper()}-{clean_path}")


def synthesize(
    provider_name: str,
    bundle: ProviderBundle,
    *,
    max_name_length: int = DEFAULT_MAX_LENGTH,
    tables: AbbreviationTables = DEFAULT_TABLES,
) -> dict[str, ToolDescriptor]:
    """Build every tool for one provider, keyed by tool id.

    Raises ProviderConfigError when no base URL can be determined.
    """
    document = bundle.document
    base_url = bundle.base_url or _server_url(document)
    if not base_url:
        raise ProviderConfigError(
            f"No server url defined in OpenAPI specification for provider "
            f"{provider_name}",
            provider=provider_name,
        )

    components = document.get("components") or {}
    tools: dict[str, ToolDescriptor] = {}

    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters") or []

        for method, op in path_item.items():
            if method == "parameters":
                continue
            if method.lower() not in HTTP_METHODS or not isinstance(op, dict):
                logger.info(
                    "Skipping non-HTTP method",
                    provider=provider_name,
                    method=method,
                    path=path,
                )
                continue

            try:
                tool = _build_tool(
                    provider_name,
                    method.lower(),
                    path,
                    op,
                    shared_params,
                    components,
                    base_url=base_url,
                    headers=bundle.headers,
                    max_name_length=max_name_length,
                    tables=tables,
                )
            except Exception as e:
                logger.warning(
                    "Skipping operation",
                    provider=provider_name,
                    method=method,
                    path=path,
                    error=str(e),
                )
                continue
            tools[tool.tool_id] = tool

    logger.info("Synthesized tools", provider=provider_name, tool_count=len(tools))
    return tools


# ----------------------------------------------------------------------
# Tool construction
# ----------------------------------------------------------------------


def _build_tool(
    provider_name: str,
    method: str,
    path: str,
    op: dict[str, Any],
    shared_params: list[Any],
    components: dict[str, Any],
    *,
    base_url: str,
    headers: dict[str, str],
    max_name_length: int,
    tables: AbbreviationTables,
) -> ToolDescriptor:
    name_source = str(
        op.get("operationId") or op.get("summary") or f"{method.upper()} {path}"
    )
    name = compress(name_source, max_name_length, tables)

    tool = ToolDescriptor(
        tool_id=build_tool_id(method, path),
        name=f"{provider_name}-{name}",
        description=op.get("description")
        or f"Make a {method.upper()} request to {path}",
        method=method,
        path=path,
        base_url=base_url,
        provider=provider_name,
        headers=dict(headers or {}),
    )

    properties: dict[str, Any] = tool.input_schema["properties"]
    required: list[str] = []
    own_params = op.get("parameters") or []
    for param in _merge_parameters(shared_params, own_params, components):
        param_spec = _classify_parameter(
            param, components, provider_name, tool.tool_id
        )
        if param_spec is None:
            continue
        prop: dict[str, Any] = {
            "type": param_spec.type,
            "description": param_spec.description,
        }
        if param_spec.type == "array":
            prop["items"] = {"type": _item_type(param, components)}
        properties[param_spec.name] = prop
        tool.params[param_spec.name] = param_spec
        if param_spec.required and param_spec.name not in required:
            required.append(param_spec.name)

    if required:
        tool.input_schema["required"] = required
    return tool


def _merge_parameters(
    shared: list[Any], own: list[Any], components: dict[str, Any]
) -> list[dict[str, Any]]:
    """Path-level parameters first; an operation's own entry replaces one
    with the same (name, in)."""
    merged: dict[tuple[Any, Any], dict[str, Any]] = {}
    anonymous: list[dict[str, Any]] = []
    for raw in [*shared, *own]:
        if not isinstance(raw, dict):
            anonymous.append({})
            continue
        param = _resolve_ref(raw, components)
        key = (param.get("name"), param.get("in"))
        if key[0] is None:
            anonymous.append(param)
        else:
            merged[key] = param
    return [*merged.values(), *anonymous]


def _classify_parameter(
    param: dict[str, Any],
    components: dict[str, Any],
    provider_name: str,
    tool_id: str,
) -> ParamSpec | None:
    if "name" not in param or "in" not in param:
        logger.info(
            "Skipping malformed parameter",
            provider=provider_name,
            tool_id=tool_id,
            parameter=param,
        )
        return None

    name = str(param["name"])
    location = param.get("in") or "query"
    if location not in PARAM_LOCATIONS:
        logger.info(
            "Skipping unsupported parameter location",
            provider=provider_name,
            tool_id=tool_id,
            parameter=name,
            location=location,
        )
        return None

    schema = _schema_of(param, components)
    return ParamSpec(
        name=name,
        location=location,
        required=bool(param.get("required", False)),
        type=schema.get("type") or "string",
        description=param.get("description") or f"{name} parameter",
    )


def _item_type(param: dict[str, Any], components: dict[str, Any]) -> str:
    schema = _schema_of(param, components)
    items = schema.get("items")
    if not isinstance(items, dict):
        return "string"
    return _resolve_ref(items, components).get("type") or "string"


def _schema_of(param: dict[str, Any], components: dict[str, Any]) -> dict[str, Any]:
    schema = param.get("schema")
    if not isinstance(schema, dict):
        return {}
    return _resolve_ref(schema, components)


# ----------------------------------------------------------------------
# $ref / server helpers
# ----------------------------------------------------------------------


def _resolve_ref(
    obj: dict[str, Any], components: dict[str, Any], _depth: int = 0
) -> dict[str, Any]:
    """Follow a local ``#/components/<section>/<name>`` reference."""
    if _depth > 15 or "$ref" not in obj:
        return obj
    ref = obj["$ref"]
    if not isinstance(ref, str) or not ref.startswith("#/components/"):
        return obj
    parts = ref.split("/")
    if len(parts) != 4:
        return obj
    _, _, section, ref_name = parts
    target = (components.get(section) or {}).get(ref_name)
    if not isinstance(target, dict):
        return obj
    return _resolve_ref(target, components, _depth + 1)


def _server_url(document: dict[str, Any]) -> str | None:
    """Return the first server URL with variables replaced by defaults."""
    servers = document.get("servers") or []
    if not servers or not isinstance(servers[0], dict):
        return None
    server = servers[0]
    url = server.get("url")
    if not url:
        return None
    variables = server.get("variables") or {}

    def _replacer(match: re.Match) -> str:
        var = variables.get(match.group(1))
        if isinstance(var, dict) and "default" in var:
            return str(var["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(_replacer, url)
