"""Constants for the CRD MCP Server.

This module defines all constants, enums, and error messages used throughout
the server to avoid magic strings and improve maintainability.
"""

from enum import Enum


class ResponseStatus(str, Enum):
    """Response status values."""

    SUCCESS = "success"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error code identifiers for error categorization."""

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"

    # Input validation errors
    EMPTY_QUERY = "EMPTY_QUERY"
    INVALID_INPUT = "INVALID_INPUT"

    # Server errors
    INDEX_UNAVAILABLE = "INDEX_UNAVAILABLE"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"

    # Generic errors
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ErrorMessage:
    """Error message templates."""

    # Input validation
    EMPTY_RESOURCE_TYPE = "Resource type cannot be empty"
    KIND_REQUIRED = "kind is required and must be a string"
    RESOURCE_TYPE_REQUIRED = (
        'resourceType is required and must be a string in format "group/kind"'
    )
    EMPTY_GUIDANCE_QUERY = (
        "At least one of resourceType, category, or tags must be provided"
    )
    INVALID_SCOPE = "Invalid scope. Must be 'Namespaced' or 'Cluster'"
    INVALID_COMPLEXITY = (
        "Invalid complexity. Must be 'simple', 'intermediate', or 'advanced'"
    )
    INVALID_LIMIT = "limit must be an integer between 1 and 50"

    # Server
    INDEX_UNAVAILABLE = "Resource index not loaded"

    # Generic
    UNEXPECTED_ERROR = "Unexpected error occurred"


# Suggestion candidates must score strictly above this similarity.
SIMILARITY_THRESHOLD = 0.3

DEFAULT_SUGGESTION_LIMIT = 5
DEFAULT_RESULT_LIMIT = 10
MAX_RESULT_LIMIT = 50

MAX_RELATED_RESOURCES = 10
MAX_DESCRIBE_GUIDANCE = 5
MAX_BEST_PRACTICES = 5

UNCATEGORIZED = "uncategorized"

KNOWN_CATEGORIES = (
    "database",
    "messaging",
    "service",
    "storage",
    "networking",
    "security",
)
