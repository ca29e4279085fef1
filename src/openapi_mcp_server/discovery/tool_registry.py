"""Tool registry: holds synthesized tools and converts them to MCP Tools."""

from __future__ import annotations

from typing import Mapping

import structlog
from mcp.types import Tool

from .compression import DEFAULT_MAX_LENGTH
from .openapi_parser import (
    ProviderBundle,
    ProviderConfigError,
    ToolDescriptor,
    synthesize,
)

logger = structlog.get_logger(__name__)


class ToolRegistry:
    """Stores ToolDescriptors keyed by tool id, in insertion order.

    Populated once at startup and only read afterwards, so concurrent
    readers need no locking.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    def load(
        self,
        bundles: Mapping[str, ProviderBundle],
        *,
        max_name_length: int = DEFAULT_MAX_LENGTH,
    ) -> int:
        """Synthesize tools for every provider. Returns count of tools added.

        A provider that fails is logged and skipped; the others still load.
        """
        added = 0
        for provider_name, bundle in bundles.items():
            try:
                tools = synthesize(
                    provider_name, bundle, max_name_length=max_name_length
                )
            except ProviderConfigError as e:
                logger.error(
                    "Skipping provider", provider=provider_name, error=str(e)
                )
                continue
            except Exception as e:
                logger.error(
                    "Failed to synthesize provider",
                    provider=provider_name,
                    error=str(e),
                    exc_info=True,
                )
                continue

            for tool_id, tool in tools.items():
                self.add(tool_id, tool)
                logger.debug(
                    "Added tool",
                    provider=provider_name,
                    tool_id=tool_id,
                    name=tool.name,
                )
            added += len(tools)

        logger.info("Tool registry loaded", tool_count=self.tool_count)
        return added

    def add(self, tool_id: str, tool: ToolDescriptor) -> None:
        """Insert or replace the tool stored under *tool_id*."""
        for other_id, other in self._tools.items():
            if other_id != tool_id and other.name == tool.name:
                logger.warning(
                    "Duplicate tool name",
                    name=tool.name,
                    tool_id=tool_id,
                    other=other_id,
                )
                break
        self._tools[tool_id] = tool

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def get(self, tool_id: str) -> ToolDescriptor | None:
        return self._tools.get(tool_id)

    def find(self, id_or_name: str) -> tuple[str, ToolDescriptor] | None:
        """Look up by tool id first, then by display name."""
        tool = self._tools.get(id_or_name)
        if tool is not None:
            return id_or_name, tool
        for tool_id, tool in self._tools.items():
            if tool.name == id_or_name:
                return tool_id, tool
        return None

    @staticmethod
    def decompose(tool_id: str) -> tuple[str, str]:
        """Split a tool id back into ``(method, path)``.

        Only meaningful for ids produced by ``build_tool_id``. Hyphens in the
        original path and removed ``{}`` braces cannot be recovered, so
        ``GET-users-id-posts`` yields ``("get", "/users/id/posts")``.
        """
        method, _, rest = tool_id.partition("-")
        return method.lower(), "/" + rest.replace("-", "/")

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self._tools.values()]

    @property
    def tool_count(self) -> int:
        return len(self._tools)

    def providers(self) -> dict[str, int]:
        """Return {provider_name: tool_count}."""
        counts: dict[str, int] = {}
        for tool in self._tools.values():
            counts[tool.provider] = counts.get(tool.provider, 0) + 1
        return dict(sorted(counts.items()))

    # ------------------------------------------------------------------
    # MCP conversion
    # ------------------------------------------------------------------

    def get_mcp_tools(self) -> list[Tool]:
        """Convert all registered tools to MCP Tool objects."""
        return [tool.to_mcp_tool() for tool in self._tools.values()]
