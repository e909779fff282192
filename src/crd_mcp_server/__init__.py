"""MCP server for custom resource definitions, samples and instructions."""

from .constants import ErrorCode, ErrorMessage, ResponseStatus
from .decorators import handle_errors
from .errors import EmptyQueryError, InvalidInputError, NotFoundError, QueryError
from .server import MCPServer, create_server

__version__ = "1.0.0"

__all__ = [
    "MCPServer",
    "create_server",
    "handle_errors",
    "ResponseStatus",
    "ErrorCode",
    "ErrorMessage",
    "QueryError",
    "NotFoundError",
    "EmptyQueryError",
    "InvalidInputError",
]
