"""Record types for the CRD knowledge index.

This module defines the immutable records the index is built from
(resource definitions, example manifests, guidance documents) and the
tagged result type every query operation returns.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .constants import ResponseStatus


class Scope(str, Enum):
    """Resource scope as declared by a definition."""

    NAMESPACED = "Namespaced"
    CLUSTER = "Cluster"


class Complexity(str, Enum):
    """Example complexity, ordered simple < intermediate < advanced."""

    SIMPLE = "simple"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        """Position of this level in the complexity order."""
        return _COMPLEXITY_ORDER[self]


_COMPLEXITY_ORDER = {
    Complexity.SIMPLE: 0,
    Complexity.INTERMEDIATE: 1,
    Complexity.ADVANCED: 2,
}


def make_resource_key(group: str, kind: str) -> str:
    """Build the composite key ``group/kind``."""
    return f"{group}/{kind}"


def _unique(values: Sequence[str]) -> Tuple[str, ...]:
    # preserves first-seen order
    return tuple(dict.fromkeys(v for v in values if isinstance(v, str)))


@dataclass(frozen=True)
class ResourceDefinition:
    """One declarative resource schema."""

    group: str
    kind: str
    plural: str
    singular: Optional[str] = None
    short_aliases: Tuple[str, ...] = ()
    scope: Scope = Scope.NAMESPACED
    versions: Tuple[str, ...] = ()
    category: Optional[str] = None
    description: Optional[str] = None
    source_location: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "short_aliases", _unique(self.short_aliases))
        object.__setattr__(self, "versions", tuple(self.versions))
        object.__setattr__(self, "scope", Scope(self.scope))

    @property
    def key(self) -> str:
        """Composite key ``group/kind``."""
        return make_resource_key(self.group, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert definition to the dictionary shape returned by tools."""
        return {
            "resource_type": self.key,
            "kind": self.kind,
            "group": self.group,
            "plural": self.plural,
            "singular": self.singular,
            "short_names": list(self.short_aliases),
            "scope": self.scope.value,
            "versions": list(self.versions),
            "category": self.category or "uncategorized",
            "description": self.description or f"Custom resource of type {self.kind}",
            "file_path": self.source_location,
        }


@dataclass(frozen=True)
class ExampleManifest:
    """A concrete sample instance of a kind.

    ``raw_content`` is the parsed manifest. Query results hand out deep
    copies of it and of ``metadata``; the indexed record is never exposed.
    """

    kind: str
    raw_content: Any
    description: str
    complexity: Complexity = Complexity.SIMPLE
    tags: Tuple[str, ...] = ()
    api_version: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)
    source_location: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _unique(self.tags))
        object.__setattr__(self, "complexity", Complexity(self.complexity))


@dataclass(frozen=True)
class GuidanceDocument:
    """Free-text guidance tagged with applicability metadata."""

    title: str
    body_text: str
    declared_kinds: Tuple[str, ...] = ()
    detected_kinds: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None
    priority: int = 0
    source_location: str = ""
    frontmatter: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "declared_kinds", _unique(self.declared_kinds))
        object.__setattr__(self, "detected_kinds", _unique(self.detected_kinds))
        object.__setattr__(self, "tags", _unique(self.tags))

    @property
    def applicable_kinds(self) -> Tuple[str, ...]:
        """Declared kinds followed by detected kinds."""
        return self.declared_kinds + self.detected_kinds


@dataclass
class ToolResult:
    """Tagged result of a query operation.

    A success carries ``data``; a failure carries ``error`` and an
    ``error_code``. Both may carry suggestions.
    """

    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: Any,
        suggestions: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ToolResult":
        """Build a success result."""
        return cls(
            success=True,
            data=data,
            suggestions=list(suggestions or []),
            metadata=dict(metadata or {}),
        )

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str,
        suggestions: Optional[List[str]] = None,
    ) -> "ToolResult":
        """Build a failure result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            suggestions=list(suggestions or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response dictionary handed to MCP clients."""
        if self.success:
            return {
                "status": ResponseStatus.SUCCESS.value,
                "data": self.data,
                "suggestions": self.suggestions,
                "metadata": self.metadata,
            }
        return {
            "status": ResponseStatus.ERROR.value,
            "error": self.error,
            "error_code": self.error_code,
            "suggestions": self.suggestions,
        }
