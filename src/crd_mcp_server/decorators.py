"""Decorators for query operations.

This module provides the error-handling decorator that turns every
failure inside a query operation into a failure result.
"""

import logging
from functools import wraps
from typing import Any, Callable, ParamSpec

from .constants import ErrorCode, ErrorMessage
from .errors import QueryError
from .models import ToolResult

logger = logging.getLogger(__name__)

P = ParamSpec("P")


def handle_errors(func: Callable[P, ToolResult]) -> Callable[P, ToolResult]:
    """Decorator to convert exceptions raised by a query operation into results.

    - QueryError subclasses keep their error code and suggestions
    - ValueError/TypeError/KeyError/AttributeError become INVALID_INPUT
    - anything else becomes UNEXPECTED_ERROR

    Args:
        func: Query operation returning a ToolResult

    Returns:
        Wrapped function that never raises
    """
    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> ToolResult:
        try:
            return func(*args, **kwargs)
        except QueryError as e:
            logger.info(f"{func.__name__} failed ({e.error_code.value}): {e.message}")
            return ToolResult.fail(e.message, e.error_code.value, e.suggestions)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Invalid input in {func.__name__}: {e}", exc_info=False)
            return ToolResult.fail(
                f"Invalid input in {func.__name__}: {e}",
                ErrorCode.INVALID_INPUT.value,
                ["Check the input shape"],
            )
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            return ToolResult.fail(
                f"{ErrorMessage.UNEXPECTED_ERROR}: {e}",
                ErrorCode.UNEXPECTED_ERROR.value,
                ["Check that names are spelled correctly"],
            )

    return wrapper
