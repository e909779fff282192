"""Relevance ranking for guidance documents.

Ranking is two-phase. Filtering keeps documents that satisfy every
supplied criterion; scoring then adds up priority and match bonuses.
Results are ordered by priority first and score second, so curators can
pin authoritative documents to the top whatever the query. Do not fold
priority into a single combined sort key.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ..constants import DEFAULT_RESULT_LIMIT, ErrorMessage, MAX_RESULT_LIMIT
from ..errors import EmptyQueryError, InvalidInputError, NotFoundError
from ..models import GuidanceDocument
from .index import ResourceIndex
from .resolver import Resolver

logger = logging.getLogger(__name__)

PRIORITY_WEIGHT = 10
KIND_MATCH_BONUS = 20
TITLE_MATCH_BONUS = 15
CATEGORY_MATCH_BONUS = 15
TAG_MATCH_BONUS = 5


@dataclass(frozen=True)
class GuidanceQuery:
    """Criteria for ranking guidance documents."""

    resource_type: Optional[str] = None
    category: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        tags = tuple(t for t in (self.tags or ()) if isinstance(t, str) and t)
        object.__setattr__(self, "tags", tags)

    @property
    def is_empty(self) -> bool:
        return not self.resource_type and not self.category and not self.tags

    def to_dict(self) -> dict:
        return {
            "resource_type": self.resource_type,
            "category": self.category,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class RankedGuidance:
    """A guidance document with its computed relevance score."""

    document: GuidanceDocument
    score: int

    @property
    def priority(self) -> int:
        return self.document.priority


def validate_limit(limit: int) -> int:
    """Check a caller-supplied result limit.

    Raises:
        InvalidInputError: If limit is not an integer in 1..50
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInputError(ErrorMessage.INVALID_LIMIT)
    if limit < 1 or limit > MAX_RESULT_LIMIT:
        raise InvalidInputError(ErrorMessage.INVALID_LIMIT)
    return limit


def _overlaps(first: str, second: str) -> bool:
    first = first.lower()
    second = second.lower()
    return first in second or second in first


def matches_resource_type(document: GuidanceDocument, resource_type: str) -> bool:
    """Whether a document applies to a resource type.

    True if some declared or detected kind contains the resource type or is
    contained in it (case-insensitive), or the body mentions it.
    """
    lowered = resource_type.lower()
    for kind in document.applicable_kinds:
        if kind and _overlaps(kind, lowered):
            return True
    return lowered in document.body_text.lower()


def matches_category(document: GuidanceDocument, category: str) -> bool:
    """Whether a document's category or tags name the category."""
    return document.category == category or category in document.tags


def matches_tags(document: GuidanceDocument, tags: Sequence[str]) -> bool:
    """Whether any query tag overlaps any document tag."""
    return any(
        _overlaps(tag, doc_tag)
        for tag in tags
        for doc_tag in document.tags
    )


def score_document(document: GuidanceDocument, query: GuidanceQuery) -> int:
    """Compute the additive relevance score of a document.

    Args:
        document: Guidance document that passed filtering
        query: Ranking criteria

    Returns:
        ``priority*10`` plus kind (20), title (15), category (15) and
        per-tag (5) bonuses
    """
    score = document.priority * PRIORITY_WEIGHT

    if query.resource_type:
        lowered = query.resource_type.lower()
        if any(lowered in kind.lower() for kind in document.applicable_kinds):
            score += KIND_MATCH_BONUS
        if lowered in document.title.lower():
            score += TITLE_MATCH_BONUS

    if query.category and document.category == query.category:
        score += CATEGORY_MATCH_BONUS

    matching_tags = [
        tag for tag in query.tags
        if any(tag.lower() in doc_tag.lower() for doc_tag in document.tags)
    ]
    score += len(matching_tags) * TAG_MATCH_BONUS

    return score


class Ranker:
    """Filter, score and order guidance documents."""

    def __init__(self, index: ResourceIndex, resolver: Optional[Resolver] = None):
        """Initialize ranker.

        Args:
            index: Built resource index; its guidance is the default corpus
            resolver: Resolver used for no-match suggestions
        """
        self.index = index
        self.resolver = resolver or Resolver(index)

    def filter(
        self,
        query: GuidanceQuery,
        corpus: Iterable[GuidanceDocument],
    ) -> List[GuidanceDocument]:
        """Keep documents satisfying every supplied criterion."""
        documents = list(corpus)
        if query.resource_type:
            documents = [
                d for d in documents
                if matches_resource_type(d, query.resource_type)
            ]
        if query.category:
            documents = [d for d in documents if matches_category(d, query.category)]
        if query.tags:
            documents = [d for d in documents if matches_tags(d, query.tags)]
        return documents

    def rank(
        self,
        query: GuidanceQuery,
        limit: int = DEFAULT_RESULT_LIMIT,
        corpus: Optional[Sequence[GuidanceDocument]] = None,
    ) -> List[RankedGuidance]:
        """Rank guidance documents for a query.

        Args:
            query: Ranking criteria, at least one field set
            limit: Maximum number of results (1..50)
            corpus: Documents to rank (default: the index's guidance)

        Returns:
            Ranked documents ordered by priority, then score, then load order

        Raises:
            EmptyQueryError: If no criteria were supplied
            InvalidInputError: If limit is out of range
            NotFoundError: If no document passes filtering
        """
        if query.is_empty:
            raise EmptyQueryError(
                ErrorMessage.EMPTY_GUIDANCE_QUERY,
                [
                    'Use resourceType for specific resource guidance (e.g., "RedisCluster")',
                    'Use category for broader guidance (e.g., "database")',
                    'Use tags for specific topics (e.g., ["production", "security"])',
                ],
            )
        validate_limit(limit)

        if corpus is None:
            corpus = self.index.guidance

        passed = self.filter(query, corpus)
        if not passed:
            raise NotFoundError(
                "No guidance documents found matching the criteria",
                self.no_match_suggestions(query, corpus),
            )

        return self.order(query, passed, limit)

    def order(
        self,
        query: GuidanceQuery,
        documents: Iterable[GuidanceDocument],
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> List[RankedGuidance]:
        """Score and order documents without filtering them.

        Returns:
            At most ``limit`` documents ordered by priority, then score,
            then input order
        """
        ranked = [RankedGuidance(d, score_document(d, query)) for d in documents]
        ranked.sort(key=lambda r: (-r.priority, -r.score))
        logger.debug(
            f"Ranked {len(ranked)} guidance documents for {query.to_dict()}"
        )
        return ranked[:limit]

    def no_match_suggestions(
        self,
        query: GuidanceQuery,
        corpus: Sequence[GuidanceDocument],
    ) -> List[str]:
        """Build suggestions for a query that matched nothing."""
        suggestions: List[str] = []

        if query.resource_type:
            similar = self.resolver.find_similar(query.resource_type, 3)
            if similar:
                suggestions.append(f"Try similar resources: {', '.join(similar)}")

        if query.category:
            categories = dict.fromkeys(
                d.category for d in corpus
                if d.category and d.category != query.category
            )
            if categories:
                suggestions.append(f"Try other categories: {', '.join(categories)}")

        tags = list(dict.fromkeys(t for d in corpus for t in d.tags))
        if tags:
            suggestions.append(f"Available tags: {', '.join(tags[:10])}")

        suggestions.append("Remove some filters to broaden the search")
        return suggestions
