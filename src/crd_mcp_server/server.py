"""MCP Server implementation for the CRD knowledge server.

This module implements the MCP server with stdio transport, data loading,
reload, lifecycle management, and capabilities declaration.
"""

import json
import logging
import os
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml
from mcp.server.fastmcp import FastMCP

from .core import ResourceIndex
from .loaders import DataLoader, LoadStatistics
from .tools.handlers import ToolHandlers
from .tools.queries import ResourceQueries
from .tools.registry import ToolRegistry
from .tools.schemas import TOOL_SCHEMAS

logger = logging.getLogger(__name__)

DATA_DIR_ENV_VAR = "CRD_MCP_DATA_DIR"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "server.yaml"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class MCPServer:
    """MCP Server exposing CRDs, sample manifests and instructions.

    The server owns the current query façade. ``reload()`` builds a new
    index off to the side and swaps the façade reference in one assignment,
    so handlers never see a half-built index.
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize MCP Server.

        Args:
            config: Server configuration dictionary. Should contain:
                - name: Server name (default: "crd-mcp-server")
                - version: Server version (default: "1.0.0")
                - description: Server description
                - transport: Transport configuration
                - logging: Logging configuration
                - workspace: Workspace configuration (path, data_dir)
                - verbose: Force DEBUG logging
        """
        self.config = config or {}
        self.name = self.config.get("name", "crd-mcp-server")
        self.version = self.config.get("version", "1.0.0")
        self.description = self.config.get(
            "description", "Custom resource definitions, samples and instructions"
        )
        self.verbose = bool(self.config.get("verbose", False))

        # Transport configuration
        transport_config = self.config.get("transport") or {}
        self.transport_type = transport_config.get("type", "stdio")

        # Logging configuration
        logging_config = self.config.get("logging") or {}
        self.log_level = "DEBUG" if self.verbose else logging_config.get("level", "INFO")
        self.log_format = logging_config.get("format", "json")
        self.log_file = logging_config.get("file")

        # Workspace configuration
        workspace_config = self.config.get("workspace") or {}
        self.workspace_path = Path(workspace_config.get("path", ".")).resolve()
        data_dir = os.environ.get(DATA_DIR_ENV_VAR) or workspace_config.get("data_dir", "data")
        self.data_dir = (self.workspace_path / data_dir).resolve()

        self.tool_registry = ToolRegistry()
        self._queries: Optional[ResourceQueries] = None
        self.statistics: Optional[LoadStatistics] = None
        self.handlers = ToolHandlers(self.get_queries)

        self._setup_logging()

        self.mcp = FastMCP(
            name=self.name,
            json_response=True,
        )
        self._registered = False

        logger.info(f"Initialized {self.name} MCP Server v{self.version}")
        logger.info(f"Transport: {self.transport_type}")
        logger.info(f"Data directory: {self.data_dir}")

    def _setup_logging(self) -> None:
        """Setup structured logging for the server."""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, str(self.log_level).upper(), logging.INFO))

        root_logger.handlers.clear()

        if self.log_format == "json":
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        # stdout carries the stdio transport
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.log_file:
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logger.info(f"Logging to file: {self.log_file}")

    def get_queries(self) -> Optional[ResourceQueries]:
        """Return the query façade currently in service."""
        return self._queries

    def _build_queries(self) -> tuple[ResourceQueries, LoadStatistics]:
        loaded = DataLoader(self.data_dir).load()
        index = ResourceIndex.build(loaded.definitions, loaded.examples, loaded.guidance)
        statistics = loaded.statistics
        statistics.warnings.extend(index.warnings)
        return ResourceQueries(index), statistics

    def load_data(self) -> LoadStatistics:
        """Load the data directory and put a fresh index into service.

        Returns:
            Statistics for the load
        """
        queries, statistics = self._build_queries()
        self._queries = queries
        self.statistics = statistics
        logger.info(f"✓ Index ready: {len(queries.index)} resource definitions")
        return statistics

    def reload(self) -> LoadStatistics:
        """Rebuild the index and swap it in.

        Calls already running keep the index they started with.

        Returns:
            Statistics for the new load
        """
        logger.info("Reloading data...")
        return self.load_data()

    def _register_capabilities(self) -> None:
        """Register tools and resources with FastMCP and the tool registry."""
        if self._registered:
            return

        logger.info("Registering server capabilities...")

        for tool_name, handler in self.handlers.as_mapping().items():
            if tool_name not in TOOL_SCHEMAS:
                logger.warning(f"Tool '{tool_name}' not found in schemas, skipping")
                continue

            schema = TOOL_SCHEMAS[tool_name]
            description = schema.get("description", "")

            self.mcp.tool(name=tool_name, description=description)(handler)

            self.tool_registry.register(
                name=tool_name,
                handler=handler,
                schema=schema,
                version="1.0.0",
                description=description,
                enabled=True,
            )
            logger.debug(f"Registered tool: {tool_name}")

        logger.info(
            f"✓ Registered {self.tool_registry.count_enabled()} tools "
            f"({self.tool_registry.count()} total)"
        )

        self._register_resources()
        self._registered = True

    def _register_resources(self) -> None:
        """Register the server status resource."""

        @self.mcp.resource("crd-server://status")
        async def status_resource() -> dict[str, Any]:
            """Current server status and load statistics."""
            return self.get_status()

        logger.info("✓ Registered status resource")

    def get_status(self) -> dict[str, Any]:
        """Status snapshot served by the ``crd-server://status`` resource."""
        return {
            "status": "ready" if self._queries is not None else "not_loaded",
            "data_dir": str(self.data_dir),
            "statistics": self.statistics.to_dict() if self.statistics else None,
            "tools": self.tool_registry.list_tools(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def start(self) -> None:
        """Start the MCP server.

        Loads data, registers capabilities and serves requests over stdio
        until the client disconnects.
        """
        logger.info("Starting MCP server...")

        if self.transport_type != "stdio":
            raise ValueError(
                f"Transport type '{self.transport_type}' not supported. "
                "Only 'stdio' is currently supported."
            )

        self.load_data()
        self._register_capabilities()

        try:
            logger.info("Server ready. Waiting for requests...")
            await self.mcp.run_stdio_async()
        except KeyboardInterrupt:
            logger.info("Received interrupt signal. Shutting down...")
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop the MCP server gracefully."""
        logger.info("Stopping MCP server...")
        logger.info("MCP server stopped")

    def get_capabilities(self) -> dict[str, Any]:
        """Get server capabilities declaration.

        Returns:
            Dictionary containing server capabilities information
        """
        return {
            "server": {
                "name": self.name,
                "version": self.version,
                "description": self.description,
            },
            "protocol": {
                "version": "2024-11-05",
            },
            "capabilities": {
                "tools": {
                    "listChanged": False,
                },
                "resources": {
                    "subscribe": False,
                    "listChanged": False,
                },
                "prompts": {
                    "listChanged": False,
                },
            },
        }


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load server configuration from a YAML file.

    The ``server`` section is flattened into the top level so ``name`` and
    ``version`` sit next to ``transport``, ``logging`` and ``workspace``.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Configuration dictionary; empty when the file is missing or invalid
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.info("Using default configuration")
        return {}

    if not isinstance(config_data, dict):
        logger.warning(f"Ignoring config in {config_path}: expected a mapping")
        return {}

    config = dict(config_data.get("server") or {})
    config.update({k: v for k, v in config_data.items() if k != "server"})
    return config


def create_server(config: Optional[dict[str, Any]] = None) -> MCPServer:
    """Factory function to create an MCP server instance.

    Args:
        config: Server configuration dictionary. If None, will try to load
                from config/server.yaml

    Returns:
        MCPServer instance
    """
    if config is None:
        config = load_config()
    return MCPServer(config)
