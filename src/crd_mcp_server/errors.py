"""Exceptions raised by the query core.

The query façade converts every one of these into a failure result, so
they never reach an MCP client as raised errors.
"""

from typing import List, Optional

from .constants import ErrorCode


class QueryError(Exception):
    """Base class for recoverable query failures."""

    error_code = ErrorCode.UNEXPECTED_ERROR

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])


class NotFoundError(QueryError):
    """A lookup or filter matched nothing."""

    error_code = ErrorCode.NOT_FOUND


class EmptyQueryError(QueryError):
    """No filter criteria were supplied where at least one is required."""

    error_code = ErrorCode.EMPTY_QUERY


class InvalidInputError(QueryError, ValueError):
    """A required field is missing or has the wrong type or value."""

    error_code = ErrorCode.INVALID_INPUT
