"""Tool schema definitions for the CRD MCP Server.

This module defines JSON Schema schemas for all MCP tools.
"""

from typing import Any

from ..constants import DEFAULT_RESULT_LIMIT, KNOWN_CATEGORIES, MAX_RESULT_LIMIT

_LIMIT_PROPERTY = {
    "type": "integer",
    "minimum": 1,
    "maximum": MAX_RESULT_LIMIT,
    "default": DEFAULT_RESULT_LIMIT,
}

# Tool schema definitions following JSON Schema specification
TOOL_SCHEMAS: dict[str, dict[str, Any]] = {
    "list_available_resources": {
        "name": "list_available_resources",
        "description": (
            "Lists all available custom resources with descriptions and filtering options. "
            "IMPORTANT: After listing resources, always use get_resource_details and "
            "get_resource_guidance to read instructions before creating any resources."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "description": (
                        f"Filter by resource category ({', '.join(KNOWN_CATEGORIES)})"
                    ),
                },
                "search": {
                    "type": "string",
                    "description": "Search term to filter resources by name, group, or description",
                },
                "group": {
                    "type": "string",
                    "description": "Filter by specific API group",
                },
                "scope": {
                    "type": "string",
                    "enum": ["Namespaced", "Cluster"],
                    "description": "Filter by resource scope",
                },
            },
            "required": [],
        },
    },
    "get_resource_details": {
        "name": "get_resource_details",
        "description": (
            "Provides comprehensive information about a specific resource type "
            "including schema, samples, and guidance"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "resource_type": {
                    "type": "string",
                    "description": (
                        'Resource type as "group/kind" (e.g., "redis.example.com/RedisCluster"), '
                        "a kind, or a short name"
                    ),
                },
            },
            "required": ["resource_type"],
        },
    },
    "find_samples": {
        "name": "find_samples",
        "description": (
            "Finds sample manifests by resource type with filtering by complexity and use case"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "kind": {
                    "type": "string",
                    "description": 'Resource kind to find samples for (e.g., "RedisCluster")',
                },
                "complexity": {
                    "type": "string",
                    "enum": ["simple", "intermediate", "advanced"],
                    "description": "Filter by sample complexity",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Filter samples by tags (e.g., ["production", "ha"])',
                },
                "limit": {
                    **_LIMIT_PROPERTY,
                    "description": "Maximum number of samples to return (default: 10)",
                },
                "include_content": {
                    "type": "boolean",
                    "description": "Include full manifest content in response",
                    "default": True,
                },
            },
            "required": ["kind"],
        },
    },
    "get_resource_guidance": {
        "name": "get_resource_guidance",
        "description": (
            "Returns instructions and guidance relevant to specific resource types or categories"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "resource_type": {
                    "type": "string",
                    "description": "Specific resource type (group/kind) or kind to get guidance for",
                },
                "category": {
                    "type": "string",
                    "description": "Resource category to get guidance for",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter guidance by specific tags",
                },
                "limit": {
                    **_LIMIT_PROPERTY,
                    "description": "Maximum number of guidance documents to return (default: 10)",
                },
            },
            "required": [],
        },
    },
}


class ToolSchema:
    """Tool schema wrapper for easier access."""

    def __init__(self, name: str, schema: dict[str, Any]):
        """Initialize tool schema.

        Args:
            name: Tool name
            schema: JSON Schema dictionary
        """
        self.name = name
        self.schema = schema
        self.description = schema.get("description", "")
        self.input_schema = schema.get("inputSchema", {})

    def get_required_params(self) -> list[str]:
        """Get list of required parameter names."""
        return self.input_schema.get("required", [])

    def get_properties(self) -> dict[str, Any]:
        """Get parameter properties."""
        return self.input_schema.get("properties", {})

    def validate_required(self, params: dict[str, Any]) -> tuple[bool, list[str]]:
        """Validate that all required parameters are present.

        Args:
            params: Parameters dictionary

        Returns:
            Tuple of (is_valid, missing_params)
        """
        required = self.get_required_params()
        missing = [param for param in required if param not in params]
        return len(missing) == 0, missing

    def unknown_params(self, params: dict[str, Any]) -> list[str]:
        """Parameter names not declared in the schema."""
        properties = self.get_properties()
        return [param for param in params if param not in properties]


def get_tool_schema(name: str) -> ToolSchema | None:
    """Get tool schema by name.

    Args:
        name: Tool name

    Returns:
        ToolSchema instance if found, None otherwise
    """
    if name not in TOOL_SCHEMAS:
        return None
    return ToolSchema(name, TOOL_SCHEMAS[name])


def get_tool_schemas() -> dict[str, ToolSchema]:
    """Get all tool schemas.

    Returns:
        Dictionary mapping tool names to ToolSchema instances
    """
    return {
        name: ToolSchema(name, schema)
        for name, schema in TOOL_SCHEMAS.items()
    }
