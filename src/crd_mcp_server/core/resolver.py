"""Layered resource resolution with fuzzy suggestions.

Resolution tries, in order: exact composite key, exact kind,
case-insensitive kind, short alias. Only when all of those miss is the
edit-distance search run, and its results are suggestions only: a fuzzy
candidate is never returned as the resolved resource.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from ..constants import DEFAULT_SUGGESTION_LIMIT, ErrorMessage, SIMILARITY_THRESHOLD
from ..errors import InvalidInputError
from ..models import ResourceDefinition
from .index import ResourceIndex
from .similarity import similarity

logger = logging.getLogger(__name__)


class MatchType(str, Enum):
    """Which resolution layer produced a hit."""

    EXACT_KEY = "exact_key"
    EXACT_KIND = "exact_kind"
    CASE_INSENSITIVE_KIND = "case_insensitive_kind"
    ALIAS = "alias"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a query string.

    Either ``definition`` is set (a hit) or ``suggestions`` lists the
    closest composite keys (a miss).
    """

    query: str
    definition: Optional[ResourceDefinition] = None
    match_type: Optional[MatchType] = None
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def found(self) -> bool:
        return self.definition is not None


class Resolver:
    """Resolve user-supplied resource names against a ResourceIndex."""

    def __init__(self, index: ResourceIndex):
        """Initialize resolver.

        Args:
            index: Built resource index
        """
        self.index = index

    def resolve(self, query: str) -> Resolution:
        """Resolve a resource name.

        Args:
            query: Composite key, kind, short alias, or free text

        Returns:
            Resolution hit, or a miss with up to five suggestions

        Raises:
            InvalidInputError: If the query is empty or not a string
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError(
                ErrorMessage.EMPTY_RESOURCE_TYPE,
                ['Use "list_available_resources" to see all available resource types'],
            )

        definition = self.index.get(query)
        if definition is not None:
            return Resolution(query, definition, MatchType.EXACT_KEY)

        definition = self.index.get_by_kind(query)
        if definition is not None:
            return Resolution(query, definition, MatchType.EXACT_KIND)

        lowered = query.lower()
        for definition in self.index.definitions():
            if definition.kind.lower() == lowered:
                return Resolution(query, definition, MatchType.CASE_INSENSITIVE_KIND)

        definition = self.index.get_by_alias(query)
        if definition is not None:
            return Resolution(query, definition, MatchType.ALIAS)

        suggestions = self.find_similar(query)
        logger.debug(f"No match for '{query}', suggestions: {suggestions}")
        return Resolution(query, suggestions=tuple(suggestions))

    def find_similar(
        self,
        query: str,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[str]:
        """Find composite keys of definitions similar to a query.

        Each definition scores the best similarity of the query against its
        kind, group and plural. Candidates must score above the threshold and
        are ordered by score descending, then kind ascending.

        Args:
            query: Free text to compare
            limit: Maximum number of keys to return

        Returns:
            Composite keys, best first
        """
        candidates = []
        for definition in self.index.definitions():
            score = max(
                similarity(query, definition.kind),
                similarity(query, definition.group),
                similarity(query, definition.plural),
            )
            if score > SIMILARITY_THRESHOLD:
                candidates.append((score, definition.kind, definition.key))

        candidates.sort(key=lambda c: (-c[0], c[1]))
        return [key for _, _, key in candidates[:limit]]

    def find_similar_kinds(
        self,
        query: str,
        kinds: Iterable[str],
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[str]:
        """Find kind names similar to a query.

        Args:
            query: Free text to compare
            kinds: Candidate kind names
            limit: Maximum number of kinds to return

        Returns:
            Kind names, best first
        """
        candidates = []
        for kind in kinds:
            score = similarity(query, kind)
            if score > SIMILARITY_THRESHOLD:
                candidates.append((score, kind))

        candidates.sort(key=lambda c: (-c[0], c[1]))
        return [kind for _, kind in candidates[:limit]]
