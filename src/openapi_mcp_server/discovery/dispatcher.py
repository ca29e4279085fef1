"""Generic HTTP dispatcher for synthesized tools."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote

import structlog

from ..client import ApiClient
from .openapi_parser import ToolDescriptor

logger = structlog.get_logger(__name__)


class MissingParameterError(ValueError):
    """A parameter the tool declares as required was not supplied."""

    def __init__(self, name: str, tool_name: str | None = None):
        super().__init__(f"Missing required parameter: {name}")
        self.name = name
        self.tool_name = tool_name


class Dispatcher:
    """Execute a ToolDescriptor with a caller-supplied argument map."""

    async def execute(
        self,
        client: ApiClient,
        tool: ToolDescriptor,
        params: Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> Any:
        """Bind *params* onto *tool*, send the request and return the payload.

        Raises MissingParameterError before any network call when a required
        parameter is absent or None; ApiClientError on transport failure or a
        non-2xx response.
        """
        self._check_required(tool, params)
        path, query, headers = self._bind_params(tool, params)
        url = self._join_url(tool.base_url, path)

        logger.info(
            "Dispatching",
            tool=tool.name,
            tool_id=tool.tool_id,
            method=tool.method.upper(),
            url=url,
        )

        return await client.request(
            tool.method.upper(),
            url,
            params=query or None,
            headers=headers or None,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @staticmethod
    def _check_required(tool: ToolDescriptor, params: Mapping[str, Any]) -> None:
        for name, spec in tool.params.items():
            if spec.required and params.get(name) is None:
                raise MissingParameterError(name, tool.name)

    @classmethod
    def _bind_params(
        cls,
        tool: ToolDescriptor,
        params: Mapping[str, Any],
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        """Split *params* into (resolved path, query map, headers).

        Names missing from the tool's input schema are ignored.
        """
        properties = tool.input_schema.get("properties", {})
        path = tool.path
        query: dict[str, Any] = {}
        headers: dict[str, str] = dict(tool.headers)

        for name, value in params.items():
            if name not in properties or value is None:
                continue
            spec = tool.params.get(name)
            if spec is None:
                continue
            if spec.location == "path":
                path = cls._substitute_path_param(path, name, value)
            elif spec.location == "header":
                headers[name] = cls._stringify(value)
            else:
                query[name] = cls._query_value(value)

        return path, query, headers

    @classmethod
    def _substitute_path_param(cls, path: str, name: str, value: Any) -> str:
        """Replace ``{name}`` with the URL-encoded value."""
        encoded = quote(cls._stringify(value), safe="!'()*")
        return re.sub(r"\{" + re.escape(name) + r"\}", lambda _: encoded, path)

    @classmethod
    def _query_value(cls, value: Any) -> Any:
        """Sequences become comma-joined strings; scalars pass through."""
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            return ",".join(cls._stringify(v) for v in value)
        return value

    @staticmethod
    def _stringify(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    @staticmethod
    def _join_url(base_url: str, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return base_url.rstrip("/") + path
