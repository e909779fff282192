"""Tool handlers for the CRD MCP Server.

Each handler looks up the query façade that is current at call time,
runs one query operation and returns the result as a response dictionary.
Handlers never hold on to a façade between calls, so a reload that swaps
the façade is picked up by the next call while calls already running
finish against the index they started with.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..constants import ErrorCode, ErrorMessage, ResponseStatus
from .queries import ResourceQueries

logger = logging.getLogger(__name__)

QueriesProvider = Callable[[], Optional[ResourceQueries]]


class ToolHandlers:
    """Async tool entry points bound to a query façade provider."""

    def __init__(self, queries_provider: QueriesProvider):
        """Initialize handlers.

        Args:
            queries_provider: Callable returning the current ResourceQueries,
                or None while no index has been loaded
        """
        self._queries_provider = queries_provider

    def _unavailable(self) -> Dict[str, Any]:
        logger.error(ErrorMessage.INDEX_UNAVAILABLE)
        return {
            "status": ResponseStatus.ERROR.value,
            "error": ErrorMessage.INDEX_UNAVAILABLE,
            "error_code": ErrorCode.INDEX_UNAVAILABLE.value,
            "suggestions": ["Check that the server data directory was loaded"],
        }

    async def list_available_resources(
        self,
        category: str | None = None,
        search: str | None = None,
        group: str | None = None,
        scope: str | None = None,
    ) -> Dict[str, Any]:
        """List available custom resources with optional filters."""
        logger.info(
            f"list_available_resources called "
            f"(category={category}, search={search}, group={group}, scope={scope})"
        )
        queries = self._queries_provider()
        if queries is None:
            return self._unavailable()
        return queries.list_resources(
            category=category, search=search, group=group, scope=scope
        ).to_dict()

    async def get_resource_details(self, resource_type: str) -> Dict[str, Any]:
        """Describe a resource type with its samples and guidance."""
        logger.info(f"get_resource_details called (resource_type={resource_type})")
        queries = self._queries_provider()
        if queries is None:
            return self._unavailable()
        return queries.describe_resource(resource_type).to_dict()

    async def find_samples(
        self,
        kind: str,
        complexity: str | None = None,
        tags: list[str] | None = None,
        limit: int = 10,
        include_content: bool = True,
    ) -> Dict[str, Any]:
        """Find sample manifests for a resource kind."""
        logger.info(
            f"find_samples called "
            f"(kind={kind}, complexity={complexity}, tags={tags}, limit={limit})"
        )
        queries = self._queries_provider()
        if queries is None:
            return self._unavailable()
        return queries.find_examples(
            kind,
            complexity=complexity,
            tags=tags,
            limit=limit,
            include_content=include_content,
        ).to_dict()

    async def get_resource_guidance(
        self,
        resource_type: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Return ranked guidance for a resource type, category or tags."""
        logger.info(
            f"get_resource_guidance called "
            f"(resource_type={resource_type}, category={category}, tags={tags}, limit={limit})"
        )
        queries = self._queries_provider()
        if queries is None:
            return self._unavailable()
        return queries.find_guidance(
            resource_type=resource_type,
            category=category,
            tags=tags,
            limit=limit,
        ).to_dict()

    def as_mapping(self) -> Dict[str, Callable]:
        """Map tool names to handler callables."""
        return {
            "list_available_resources": self.list_available_resources,
            "get_resource_details": self.get_resource_details,
            "find_samples": self.find_samples,
            "get_resource_guidance": self.get_resource_guidance,
        }
