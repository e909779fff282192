"""Tool registry for the CRD MCP Server.

This module implements the tool registration system that manages tool
discovery, enablement, and routing by name.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ..constants import ErrorCode, ResponseStatus
from .schemas import ToolSchema

logger = logging.getLogger(__name__)


@dataclass
class ToolMetadata:
    """Metadata for a registered tool."""

    name: str
    version: str
    handler: Callable[..., Awaitable[dict[str, Any]]]
    schema: dict[str, Any]
    enabled: bool = True
    description: str | None = None


class ToolRegistry:
    """Registry for managing MCP tools.

    This registry provides:
    - Tool registration and discovery
    - Enabling and disabling tools
    - Routing a call by tool name
    """

    def __init__(self):
        """Initialize empty tool registry."""
        self._tools: dict[str, ToolMetadata] = {}
        logger.debug("Tool registry initialized")

    def register(
        self,
        name: str,
        handler: Callable[..., Awaitable[dict[str, Any]]],
        schema: dict[str, Any],
        version: str = "1.0.0",
        description: str | None = None,
        enabled: bool = True,
    ) -> None:
        """Register a tool in the registry.

        Args:
            name: Tool name (must be unique)
            handler: Async callable that implements the tool
            schema: JSON Schema for the tool parameters
            version: Tool version (default: "1.0.0")
            description: Tool description
            enabled: Whether the tool is enabled (default: True)

        Raises:
            ValueError: If tool name already exists with another version
        """
        if name in self._tools:
            existing = self._tools[name]
            if existing.version == version:
                logger.warning(
                    f"Tool '{name}' v{version} already registered. "
                    "Skipping duplicate registration."
                )
                return
            raise ValueError(
                f"Tool '{name}' already registered with version "
                f"{existing.version}. Cannot register version {version}."
            )

        self._tools[name] = ToolMetadata(
            name=name,
            version=version,
            handler=handler,
            schema=schema,
            enabled=enabled,
            description=description or schema.get("description", ""),
        )
        logger.debug(f"Registered tool: {name} v{version} (enabled={enabled})")

    def get(self, name: str) -> ToolMetadata | None:
        """Get tool metadata by name."""
        return self._tools.get(name)

    def get_handler(self, name: str) -> Callable[..., Awaitable[dict[str, Any]]] | None:
        """Get tool handler function by name.

        Returns:
            Handler function if found and enabled, None otherwise
        """
        tool = self._tools.get(name)
        if tool and tool.enabled:
            return tool.handler
        return None

    def list_tools(self, enabled_only: bool = True) -> list[str]:
        """List all registered tool names.

        Args:
            enabled_only: If True, only return enabled tools

        Returns:
            List of tool names
        """
        if enabled_only:
            return [name for name, tool in self._tools.items() if tool.enabled]
        return list(self._tools.keys())

    def get_all_schemas(self) -> dict[str, dict[str, Any]]:
        """Get schemas of all enabled tools."""
        return {
            name: tool.schema
            for name, tool in self._tools.items()
            if tool.enabled
        }

    def enable(self, name: str) -> None:
        """Enable a tool.

        Raises:
            KeyError: If tool not found
        """
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' not found")
        self._tools[name].enabled = True
        logger.info(f"Enabled tool: {name}")

    def disable(self, name: str) -> None:
        """Disable a tool.

        Raises:
            KeyError: If tool not found
        """
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' not found")
        self._tools[name].enabled = False
        logger.info(f"Disabled tool: {name}")

    def count(self) -> int:
        """Get total number of registered tools."""
        return len(self._tools)

    def count_enabled(self) -> int:
        """Get number of enabled tools."""
        return sum(1 for tool in self._tools.values() if tool.enabled)

    async def execute(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Route a call to the named tool.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            Tool response dictionary, or an error response when the tool is
            unknown, disabled, or missing required arguments
        """
        arguments = arguments or {}
        handler = self.get_handler(name)
        if handler is None:
            return {
                "status": ResponseStatus.ERROR.value,
                "error": f'Tool "{name}" not found',
                "error_code": ErrorCode.TOOL_NOT_FOUND.value,
                "suggestions": [f"Available tools: {', '.join(self.list_tools())}"],
            }

        schema = ToolSchema(name, self._tools[name].schema)
        is_valid, missing = schema.validate_required(arguments)
        unknown = schema.unknown_params(arguments)
        if not is_valid or unknown:
            problems = []
            if missing:
                problems.append(f"missing required parameters: {', '.join(missing)}")
            if unknown:
                problems.append(f"unknown parameters: {', '.join(unknown)}")
            return {
                "status": ResponseStatus.ERROR.value,
                "error": f"Invalid arguments for {name}: {'; '.join(problems)}",
                "error_code": ErrorCode.INVALID_INPUT.value,
                "suggestions": ["Check the tool parameters and try again"],
            }

        logger.debug(f"Executing tool: {name} with {arguments}")
        return await handler(**arguments)
