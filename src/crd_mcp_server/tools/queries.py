"""Query operations exposed as MCP tools.

This module implements the four read-only operations (list, describe,
find examples, find guidance) on top of the resolver, the ranker and the
resource index. Every operation returns a ToolResult; failures are values,
never raised exceptions.
"""

import copy
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..constants import (
    DEFAULT_RESULT_LIMIT,
    ErrorMessage,
    MAX_BEST_PRACTICES,
    MAX_DESCRIBE_GUIDANCE,
    MAX_RELATED_RESOURCES,
    UNCATEGORIZED,
)
from ..core.index import ResourceIndex
from ..core.ranker import (
    GuidanceQuery,
    RankedGuidance,
    Ranker,
    matches_resource_type,
    matches_tags,
    validate_limit,
)
from ..core.resolver import Resolver
from ..decorators import handle_errors
from ..errors import InvalidInputError, NotFoundError
from ..models import (
    Complexity,
    ExampleManifest,
    GuidanceDocument,
    ResourceDefinition,
    Scope,
    ToolResult,
)

logger = logging.getLogger(__name__)

CONTENT_PREVIEW_LENGTH = 500
TRUNCATE_CONTENT_LENGTH = 1000

_INLINE_PRACTICE_PATTERNS = [
    re.compile(r"best practices?[:\-\s]([^\n]+)", re.IGNORECASE),
    re.compile(r"recommended?[:\-\s]([^\n]+)", re.IGNORECASE),
    re.compile(r"important[:\-\s]([^\n]+)", re.IGNORECASE),
    re.compile(r"note[:\-\s]([^\n]+)", re.IGNORECASE),
]

_SECTION_PRACTICE_PATTERNS = [
    re.compile(r"(?:^|\n)## Best Practices?\s*\n([\s\S]*?)(?=\n## |\n# |$)", re.IGNORECASE),
    re.compile(r"(?:^|\n)## Recommendations?\s*\n([\s\S]*?)(?=\n## |\n# |$)", re.IGNORECASE),
    re.compile(r"(?:^|\n)\*\*Best Practice[:\s]*\*\*(.*?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"(?:^|\n)> \*\*Note[:\s]*\*\*(.*?)(?:\n|$)", re.IGNORECASE),
]

_CATEGORY_PRACTICES = {
    "database": [
        "Always configure persistent storage for production databases",
        "Set appropriate resource limits and requests",
    ],
    "messaging": [
        "Configure proper replication for high availability",
        "Monitor queue depth and consumer lag",
    ],
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _optional_str(value: Any, name: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidInputError(f"{name} must be a string")
    return value


def _tag_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidInputError("tags must be a list of strings")
    if not all(isinstance(tag, str) for tag in value):
        raise InvalidInputError("tags must be a list of strings")
    return [tag for tag in value if tag]


def truncate_content(content: Any, max_length: int = TRUNCATE_CONTENT_LENGTH) -> Any:
    """Return content unchanged if its JSON form is short, else a preview."""
    text = json.dumps(content, indent=2, default=str)
    if len(text) <= max_length:
        return content
    return {"truncated": True, "preview": text[:max_length]}


def preview_text(text: str, max_length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Cut text to a preview, marking the cut with an ellipsis."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def extract_inline_practices(
    documents: Sequence[GuidanceDocument],
    category: Optional[str],
) -> List[str]:
    """Pull one-line recommendations out of guidance, plus category defaults."""
    practices: List[str] = []
    for document in documents[:3]:
        content = document.body_text.lower()
        for pattern in _INLINE_PRACTICE_PATTERNS:
            for match in pattern.finditer(content):
                text = match.group(1)
                if 10 < len(text) < 200:
                    practices.append(text.strip())

    practices.extend(_CATEGORY_PRACTICES.get(category or "", []))
    return practices[:MAX_BEST_PRACTICES]


def extract_practice_sections(documents: Sequence[GuidanceDocument]) -> List[str]:
    """Pull bullet points out of "Best Practices"-style sections."""
    practices: List[str] = []
    for document in documents[:5]:
        for pattern in _SECTION_PRACTICE_PATTERNS:
            for match in pattern.finditer(document.body_text):
                if not match.group(1):
                    continue
                for line in match.group(1).split("\n"):
                    line = line.strip()
                    if 10 < len(line) < 200:
                        practices.append(re.sub(r"^[-*]\s*", "", line).strip())

    return list(dict.fromkeys(practices))[:10]


def generate_basic_spec(definition: ResourceDefinition) -> Dict[str, Any]:
    """Skeleton ``spec`` block for a definition's category."""
    kind = definition.kind.lower()
    if definition.category == "database":
        spec: Dict[str, Any] = {"version": "1.0", "replicas": 1}
        if "redis" in kind:
            spec["mode"] = "standalone"
        return spec
    if definition.category == "messaging":
        spec = {"replicas": 3}
        if "kafka" in kind:
            spec["partitions"] = 1
            spec["replicationFactor"] = 1
        return spec
    if definition.category == "service":
        return {"port": 8080, "replicas": 2}
    return {"enabled": True}


def _example_dict(example: ExampleManifest, include_content: bool = True) -> Dict[str, Any]:
    result = {
        "description": example.description,
        "complexity": example.complexity.value,
        "tags": list(example.tags),
        "api_version": example.api_version,
        "file_path": example.source_location,
        "metadata": copy.deepcopy(example.metadata),
    }
    if include_content:
        result["content"] = copy.deepcopy(example.raw_content)
    return result


class ResourceQueries:
    """Read-only query façade over a built ResourceIndex.

    An instance is bound to one index for its lifetime. The server swaps in
    a new instance on reload rather than mutating this one.
    """

    def __init__(self, index: ResourceIndex):
        """Initialize query façade.

        Args:
            index: Built resource index
        """
        self.index = index
        self.resolver = Resolver(index)
        self.ranker = Ranker(index, self.resolver)

    # ------------------------------------------------------------------
    # ListResources
    # ------------------------------------------------------------------

    @handle_errors
    def list_resources(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        group: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> ToolResult:
        """List resource definitions with optional filters.

        Args:
            category: Exact category
            search: Case-insensitive substring over kind, group, plural,
                description and composite key
            group: Exact API group
            scope: "Namespaced" or "Cluster"

        Returns:
            ToolResult with resources sorted by category (unset last) then
            kind, and a category histogram
        """
        category = _optional_str(category, "category")
        search = _optional_str(search, "search")
        group = _optional_str(group, "group")
        scope = _optional_str(scope, "scope")
        if scope is not None and scope not in {s.value for s in Scope}:
            raise InvalidInputError(ErrorMessage.INVALID_SCOPE)

        resources = self.index.definitions()
        if category:
            resources = [d for d in resources if d.category == category]
        if group:
            resources = [d for d in resources if d.group == group]
        if scope:
            resources = [d for d in resources if d.scope.value == scope]
        if search:
            term = search.lower()
            resources = [
                d for d in resources
                if term in d.kind.lower()
                or term in d.group.lower()
                or term in d.plural.lower()
                or (d.description and term in d.description.lower())
                or term in d.key.lower()
            ]

        # unset categories sort last
        resources.sort(key=lambda d: (d.category is None, d.category or "", d.kind))

        filters = {"category": category, "search": search, "group": group, "scope": scope}
        if not resources:
            message = "No resources found matching the criteria"
            if search:
                message += f' for "{search}"'
            raise NotFoundError(message, self._list_miss_suggestions(category, search))

        histogram: Dict[str, int] = {}
        for definition in resources:
            name = definition.category or UNCATEGORIZED
            histogram[name] = histogram.get(name, 0) + 1

        resource_list = [d.to_dict() for d in resources]
        return ToolResult.ok(
            {
                "resources": resource_list,
                "total_count": len(resource_list),
                "categories": histogram,
            },
            self._list_usage_suggestions(resources),
            {"filter_applied": filters, "loaded_at": _now()},
        )

    def _list_miss_suggestions(
        self,
        category: Optional[str],
        search: Optional[str],
    ) -> List[str]:
        suggestions: List[str] = []
        if search:
            similar = self.resolver.find_similar(search, 3)
            if similar:
                suggestions.append(
                    f"Did you mean one of these resources: {', '.join(similar)}?"
                )
        if category:
            others = [c for c in self.index.categories() if c != category]
            if others:
                suggestions.append(f"Try other categories: {', '.join(others)}")
        if len(self.index) > 0:
            suggestions.append(
                "Use the get_resource_details tool to learn more about specific resources"
            )
            suggestions.append("Remove filters to see all available resources")
        return suggestions

    @staticmethod
    def _list_usage_suggestions(resources: List[ResourceDefinition]) -> List[str]:
        first = resources[0]
        suggestions = [
            f'NEXT STEPS: Use "get_resource_details" with resourceType "{first.key}" for schema and samples',
            'THEN: Use "get_resource_guidance" to read deployment instructions before creating resources',
        ]
        if len(resources) > 5:
            suggestions.append(
                "Consider using category or search filters to narrow down results"
            )
        return suggestions

    # ------------------------------------------------------------------
    # DescribeResource
    # ------------------------------------------------------------------

    @handle_errors
    def describe_resource(self, resource_type: str) -> ToolResult:
        """Describe one resource with its examples, guidance and neighbours.

        Args:
            resource_type: Composite key, kind, or short alias

        Returns:
            ToolResult with metadata, examples, guidance (top 5), related
            resources (up to 10), usage examples and best practices
        """
        if not isinstance(resource_type, str):
            raise InvalidInputError(
                ErrorMessage.RESOURCE_TYPE_REQUIRED,
                ['Use "list_available_resources" to see all available resource types'],
            )

        resolution = self.resolver.resolve(resource_type)
        if not resolution.found:
            if resolution.suggestions:
                suggestions = [f"Did you mean: {', '.join(resolution.suggestions)}?"]
            else:
                suggestions = [
                    'Use "list_available_resources" to see all available resource types'
                ]
            raise NotFoundError(f'Resource type "{resource_type}" not found', suggestions)

        definition = resolution.definition
        examples = self.index.examples_for(definition.kind)
        guidance = self._guidance_for(definition)
        related = self.find_related_resources(definition)

        result = {
            "resource_type": definition.key,
            "metadata": definition.to_dict(),
            "samples": [
                {
                    **_example_dict(example, include_content=False),
                    "content": (
                        copy.deepcopy(example.raw_content)
                        if example.complexity is Complexity.SIMPLE
                        else truncate_content(copy.deepcopy(example.raw_content))
                    ),
                }
                for example in examples
            ],
            "instructions": [
                {
                    "title": r.document.title,
                    "content": preview_text(r.document.body_text),
                    "tags": list(r.document.tags),
                    "priority": r.priority,
                    "score": r.score,
                    "file_path": r.document.source_location,
                }
                for r in guidance
            ],
            "related_resources": related,
            "usage_examples": self._usage_examples(definition, examples),
            "best_practices": extract_inline_practices(
                [r.document for r in guidance], definition.category
            ),
        }

        return ToolResult.ok(
            result,
            self._detail_suggestions(definition, examples, guidance),
            {
                "match_type": resolution.match_type.value,
                "samples_available": len(examples),
                "instructions_found": len(guidance),
                "related_resources_found": len(related),
            },
        )

    def _guidance_for(self, definition: ResourceDefinition) -> List[RankedGuidance]:
        """Guidance that names the kind or shares a tag with its category.

        Either condition is enough; the ranker only scores and orders.
        """
        category = definition.category
        candidates = [
            d for d in self.index.guidance
            if matches_resource_type(d, definition.kind)
            or (category and matches_tags(d, [category]))
        ]
        tags = (category,) if category else ()
        query = GuidanceQuery(resource_type=definition.kind, tags=tags)
        return self.ranker.order(query, candidates, MAX_DESCRIBE_GUIDANCE)

    def find_related_resources(self, definition: ResourceDefinition) -> List[Dict[str, Any]]:
        """Find resources related to a definition.

        Same group first, then same category in other groups, then kinds that
        appear inside the definition's serialised example payloads. The last
        heuristic is plain substring matching and can produce false positives.

        Args:
            definition: Definition to find neighbours for

        Returns:
            Up to ten related resource entries
        """
        related: List[Dict[str, Any]] = []
        others = [d for d in self.index.definitions() if d.kind != definition.kind]

        for other in others:
            if other.group == definition.group:
                related.append({
                    "resource_type": other.key,
                    "kind": other.kind,
                    "relationship": "same-group",
                    "description": other.description or f"Related {other.kind} resource",
                })

        if definition.category:
            for other in others:
                if other.category == definition.category and other.group != definition.group:
                    related.append({
                        "resource_type": other.key,
                        "kind": other.kind,
                        "relationship": "same-category",
                        "description": (
                            other.description
                            or f"Related {other.kind} in {definition.category}"
                        ),
                    })

        referenced: Dict[str, None] = {}
        for example in self.index.examples_for(definition.kind):
            payload = json.dumps(example.raw_content, default=str)
            for other in others:
                if other.kind in payload:
                    referenced[other.kind] = None

        seen = {r["resource_type"] for r in related}
        for kind in referenced:
            other = self.index.get_by_kind(kind)
            if other is None or other.key in seen:
                continue
            seen.add(other.key)
            related.append({
                "resource_type": other.key,
                "kind": other.kind,
                "relationship": "referenced-in-samples",
                "description": f"Often used together with {definition.kind}",
            })

        return related[:MAX_RELATED_RESOURCES]

    @staticmethod
    def _usage_examples(
        definition: ResourceDefinition,
        examples: Sequence[ExampleManifest],
    ) -> List[Dict[str, Any]]:
        version = definition.versions[0] if definition.versions else "v1"
        api_version = f"{definition.group}/{version}"
        metadata: Dict[str, Any] = {"name": f"example-{definition.kind.lower()}"}
        if definition.scope is Scope.NAMESPACED:
            metadata["namespace"] = "default"

        usage = [{
            "title": f"Create a basic {definition.kind}",
            "description": f"How to create a simple {definition.kind} resource",
            "api_version": api_version,
            "kind": definition.kind,
            "example": {
                "apiVersion": api_version,
                "kind": definition.kind,
                "metadata": metadata,
                "spec": generate_basic_spec(definition),
            },
        }]

        simple = [e for e in examples if e.complexity is Complexity.SIMPLE][:2]
        for example in simple:
            usage.append({
                "title": example.description,
                "description": f"Example from: {example.source_location}",
                "api_version": example.api_version,
                "kind": example.kind,
                "example": copy.deepcopy(example.raw_content),
                "tags": list(example.tags),
            })
        return usage

    @staticmethod
    def _detail_suggestions(
        definition: ResourceDefinition,
        examples: Sequence[ExampleManifest],
        guidance: Sequence[RankedGuidance],
    ) -> List[str]:
        suggestions: List[str] = []
        if examples:
            suggestions.append(
                f'Use "find_samples" with kind "{definition.kind}" to see all '
                f"{len(examples)} available examples"
            )
            complex_count = sum(1 for e in examples if e.complexity is not Complexity.SIMPLE)
            if complex_count:
                suggestions.append(
                    f"{complex_count} advanced samples available for production scenarios"
                )
        else:
            suggestions.append(
                "No sample manifests available - consider creating basic examples"
            )
        if guidance:
            suggestions.append(
                f'Use "get_resource_guidance" for detailed setup instructions for {definition.kind}'
            )
        return suggestions

    # ------------------------------------------------------------------
    # FindExamples
    # ------------------------------------------------------------------

    @handle_errors
    def find_examples(
        self,
        kind: str,
        complexity: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: int = DEFAULT_RESULT_LIMIT,
        include_content: bool = True,
    ) -> ToolResult:
        """Find example manifests for an exact kind.

        Args:
            kind: Exact resource kind (no fuzzy matching)
            complexity: Keep only this complexity level
            tags: Keep examples with a tag containing any of these
            limit: Maximum number of examples (1..50)
            include_content: Include the manifest payloads

        Returns:
            ToolResult with examples sorted simple -> advanced, then by
            description
        """
        if not isinstance(kind, str) or not kind:
            raise InvalidInputError(
                ErrorMessage.KIND_REQUIRED,
                ['Use "list_available_resources" to see available resource kinds'],
            )
        complexity = _optional_str(complexity, "complexity")
        if complexity is not None and complexity not in {c.value for c in Complexity}:
            raise InvalidInputError(ErrorMessage.INVALID_COMPLEXITY)
        tags = _tag_list(tags)
        validate_limit(limit)

        all_examples = list(self.index.examples_for(kind))
        if not all_examples:
            raise NotFoundError(
                f'No samples found for resource kind "{kind}"',
                self._alternative_kinds(kind),
            )

        filtered = all_examples
        if complexity:
            filtered = [e for e in filtered if e.complexity.value == complexity]
        if tags:
            filtered = [
                e for e in filtered
                if any(
                    tag.lower() in example_tag.lower()
                    for tag in tags
                    for example_tag in e.tags
                )
            ]

        available_complexities = list(dict.fromkeys(e.complexity.value for e in all_examples))
        if not filtered:
            raise NotFoundError(
                f'No samples found for "{kind}" with the specified filters',
                [
                    "Try removing some filters",
                    f"{len(all_examples)} total samples available for {kind}",
                    f"Available complexities: {', '.join(available_complexities)}",
                ],
            )

        ordered = sorted(filtered, key=lambda e: (e.complexity.rank, e.description))
        selected = ordered[:limit]

        result = {
            "kind": kind,
            "total_samples": len(all_examples),
            "filtered_count": len(filtered),
            "returned_count": len(selected),
            "samples": [_example_dict(e, include_content) for e in selected],
            "available_complexities": available_complexities,
            "available_tags": list(dict.fromkeys(t for e in all_examples for t in e.tags)),
        }
        return ToolResult.ok(
            result,
            self._sample_suggestions(kind, filtered, all_examples),
            {"filters_applied": {"complexity": complexity, "tags": tags}, "loaded_at": _now()},
        )

    def _alternative_kinds(self, kind: str) -> List[str]:
        available = list(self.index.examples)
        if not available:
            return ["No sample manifests are available in the data directory"]

        suggestions: List[str] = []
        similar = self.resolver.find_similar_kinds(kind, available)
        for key in self.resolver.find_similar(kind):
            candidate = self.index.get(key)
            if candidate and candidate.kind in self.index.examples and candidate.kind not in similar:
                similar.append(candidate.kind)
        if similar:
            suggestions.append(f"Did you mean one of these: {', '.join(similar)}?")
        suggestions.append(f"Available kinds with samples: {', '.join(available)}")
        return suggestions

    @staticmethod
    def _sample_suggestions(
        kind: str,
        samples: Sequence[ExampleManifest],
        all_samples: Sequence[ExampleManifest],
    ) -> List[str]:
        suggestions: List[str] = []
        simple_count = sum(1 for s in samples if s.complexity is Complexity.SIMPLE)
        advanced_count = sum(1 for s in samples if s.complexity is Complexity.ADVANCED)
        if simple_count:
            suggestions.append(
                f"{simple_count} simple examples available - good starting points"
            )
        if advanced_count:
            suggestions.append(
                f"{advanced_count} advanced examples available for production scenarios"
            )
        suggestions.append(
            f'Use "get_resource_details" with resourceType to understand the {kind} schema'
        )
        if len(samples) < len(all_samples):
            suggestions.append(
                f"{len(all_samples) - len(samples)} additional samples available with different filters"
            )
        if any("prod" in tag for s in all_samples for tag in s.tags):
            suggestions.append(
                'Production-ready examples available - filter by tags: ["production"]'
            )
        return suggestions

    # ------------------------------------------------------------------
    # FindGuidance
    # ------------------------------------------------------------------

    @handle_errors
    def find_guidance(
        self,
        resource_type: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> ToolResult:
        """Rank guidance documents for a resource type, category or tags.

        Args:
            resource_type: Kind or composite key
            category: Guidance category
            tags: Topic tags
            limit: Maximum number of documents (1..50)

        Returns:
            ToolResult with ranked guidance, related resources and best
            practices; EMPTY_QUERY failure when no criteria are given
        """
        query = GuidanceQuery(
            resource_type=_optional_str(resource_type, "resourceType"),
            category=_optional_str(category, "category"),
            tags=tuple(_tag_list(tags)),
        )
        ranked = self.ranker.rank(query, limit=limit)
        documents = [r.document for r in ranked]

        result = {
            "criteria": query.to_dict(),
            "guidance_count": len(ranked),
            "total_available": len(self.index.guidance),
            "guidance": [
                {
                    "title": r.document.title,
                    "content": preview_text(r.document.body_text),
                    "tags": list(r.document.tags),
                    "applicable_kinds": list(r.document.applicable_kinds),
                    "category": r.document.category,
                    "priority": r.priority,
                    "score": r.score,
                    "file_path": r.document.source_location,
                }
                for r in ranked
            ],
            "related_resources": self._resources_from_guidance(documents),
            "best_practices": extract_practice_sections(documents),
        }
        return ToolResult.ok(
            result,
            self._guidance_suggestions(query, documents),
            {"search_criteria": query.to_dict(), "loaded_at": _now()},
        )

    def _resources_from_guidance(
        self,
        documents: Sequence[GuidanceDocument],
    ) -> List[Dict[str, Any]]:
        keys: Dict[str, None] = {}
        for document in documents:
            for kind in document.applicable_kinds:
                lowered = kind.lower()
                if not lowered:
                    continue
                for definition in self.index.definitions():
                    if lowered in definition.key.lower() or lowered in definition.kind.lower():
                        keys[definition.key] = None

        related = []
        for key in list(keys)[:MAX_RELATED_RESOURCES]:
            definition = self.index.get(key)
            related.append({
                "resource_type": key,
                "kind": definition.kind,
                "description": definition.description or f"{definition.kind} resource",
            })
        return related

    @staticmethod
    def _guidance_suggestions(
        query: GuidanceQuery,
        documents: Sequence[GuidanceDocument],
    ) -> List[str]:
        suggestions = ['Use "find_samples" to see practical examples for these resources']
        if query.resource_type:
            suggestions.append(
                f'Use "get_resource_details" for detailed schema information about {query.resource_type}'
            )
        if any(
            "production" in d.tags or "production" in d.body_text.lower()
            for d in documents
        ):
            suggestions.append("Production deployment guidance is available in the results")
        return suggestions
