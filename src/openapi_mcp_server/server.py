"""OpenAPI MCP Server: serves synthesized REST tools over stdio or HTTP."""

import asyncio
import contextlib
import json
import logging
import sys
from typing import Any, Dict, Optional

import structlog
import uvicorn
from mcp import types
from mcp.server import Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import Tool
from starlette.applications import Starlette
from starlette.routing import Route

from .client import ApiClient, ApiClientError
from .config import ConfigError, ServerConfig, load_config
from .discovery.dispatcher import Dispatcher, MissingParameterError
from .discovery.loader import SpecLoadError, load_provider_bundles
from .discovery.tool_registry import ToolRegistry

logger = structlog.get_logger(__name__)


class _StreamableHTTPEndpoint:
    """ASGI endpoint handing every request to the streamable-HTTP transport."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope, receive, send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


class OpenAPIMCPServer:
    """MCP server whose tools are synthesized from OpenAPI documents."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.server = Server(config.server_name)

        self.registry = ToolRegistry()
        self.dispatcher = Dispatcher()
        self.client = ApiClient(timeout=config.request_timeout)

        self._register_handlers()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover_tools(self) -> int:
        """Load every provider under the specs directory. Returns tool count."""
        bundles = load_provider_bundles(self.config.specs_directory)
        count = self.registry.load(
            bundles, max_name_length=self.config.max_name_length
        )
        logger.info(
            "Tool discovery complete",
            tool_count=count,
            providers=self.registry.providers(),
        )
        return count

    # ------------------------------------------------------------------
    # MCP handlers
    # ------------------------------------------------------------------

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            tools = self.registry.get_mcp_tools()
            logger.info("list_tools", count=len(tools))
            return tools

        @self.server.call_tool()
        async def call_tool(
            name: str, arguments: Optional[Dict[str, Any]]
        ) -> list[types.TextContent]:
            text = await self.call_tool(name, arguments or {})
            return [types.TextContent(type="text", text=text)]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        """Run the tool found by id or name and render its result as text."""
        logger.info("call_tool", tool=name)

        found = self.registry.find(name)
        if found is None:
            return f"Unknown tool: {name}"
        _, tool = found

        try:
            result = await self.dispatcher.execute(self.client, tool, arguments)
        except MissingParameterError as e:
            logger.warning("Missing parameter", error=str(e), tool=name)
            return f"Error: {e}"
        except ApiClientError as e:
            logger.error(
                "API error", error=str(e), status_code=e.status_code, tool=name
            )
            return f"API error: {e}"
        except Exception as e:
            logger.error("Unexpected error", error=str(e), tool=name, exc_info=True)
            return f"Error: {e}"

        if isinstance(result, str):
            return result
        return json.dumps(result, indent=2, default=str)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=self.config.server_name,
            server_version=self.config.server_version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
            ),
        )

    async def run(self) -> None:
        self.discover_tools()
        logger.info(
            "Starting OpenAPI MCP server", transport=self.config.transport_type
        )
        try:
            if self.config.transport_type == "http":
                await self._run_http()
            else:
                await self._run_stdio()
        finally:
            await self.client.aclose()

    async def _run_stdio(self) -> None:
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self._initialization_options(),
            )

    def build_http_app(self) -> Starlette:
        """Starlette app serving the MCP endpoint at exactly ``endpoint_path``."""
        session_manager = StreamableHTTPSessionManager(app=self.server)

        @contextlib.asynccontextmanager
        async def lifespan(app: Starlette):
            async with session_manager.run():
                yield

        return Starlette(
            routes=[
                Route(
                    self.config.endpoint_path,
                    endpoint=_StreamableHTTPEndpoint(session_manager),
                )
            ],
            lifespan=lifespan,
        )

    async def _run_http(self) -> None:
        server = uvicorn.Server(
            uvicorn.Config(
                self.build_http_app(),
                host=self.config.http_host,
                port=self.config.http_port,
                log_level=self.config.log_level.lower(),
            )
        )
        logger.info(
            "Listening",
            host=self.config.http_host,
            port=self.config.http_port,
            path=self.config.endpoint_path,
        )
        await server.serve()


# ------------------------------------------------------------------
# Entry points
# ------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Send JSON logs to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


async def async_main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error("Configuration error", error=str(e))
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        server = OpenAPIMCPServer(config)
        await server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except SpecLoadError as e:
        logger.error("Failed to load OpenAPI specs", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.error("Server error", error=str(e), exc_info=True)
        sys.exit(1)


def main() -> None:
    """Synchronous entry point for console script."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
