"""MCP tools: query operations, handlers, schemas and registry."""

from .handlers import ToolHandlers
from .queries import ResourceQueries
from .registry import ToolMetadata, ToolRegistry
from .schemas import (
    ToolSchema,
    get_tool_schema,
    get_tool_schemas,
    TOOL_SCHEMAS,
)

__all__ = [
    "ToolHandlers",
    "ResourceQueries",
    "ToolMetadata",
    "ToolRegistry",
    "ToolSchema",
    "get_tool_schema",
    "get_tool_schemas",
    "TOOL_SCHEMAS",
]
