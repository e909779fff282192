"""Immutable in-memory index over resource definitions.

The index is built once from pre-parsed records and never mutated
afterwards. Reloading means building a new index and swapping the
reference held by the server.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..models import ExampleManifest, GuidanceDocument, ResourceDefinition

logger = logging.getLogger(__name__)


class ResourceIndex:
    """Read-only views over definitions, examples and guidance.

    Views:
    - primary map: composite key -> definition
    - by-kind map: kind (case-sensitive) -> definition
    - alias map: lowercased short alias -> definition
    - example map: kind -> examples in load order
    - guidance corpus in load order
    """

    def __init__(
        self,
        by_key: Dict[str, ResourceDefinition],
        by_kind: Dict[str, ResourceDefinition],
        by_alias: Dict[str, ResourceDefinition],
        examples: Dict[str, Tuple[ExampleManifest, ...]],
        guidance: Tuple[GuidanceDocument, ...],
        warnings: Tuple[str, ...] = (),
    ):
        self._by_key = MappingProxyType(by_key)
        self._by_kind = MappingProxyType(by_kind)
        self._by_alias = MappingProxyType(by_alias)
        self._examples = MappingProxyType(examples)
        self._guidance = guidance
        self.warnings = warnings

    @classmethod
    def build(
        cls,
        definitions: Iterable[ResourceDefinition],
        examples: Optional[Mapping[str, Sequence[ExampleManifest]]] = None,
        guidance: Optional[Iterable[GuidanceDocument]] = None,
    ) -> "ResourceIndex":
        """Build an index from pre-parsed records.

        Duplicate composite keys do not abort the build: the last
        definition wins and a warning is recorded on the index.

        Args:
            definitions: Resource definitions in load order
            examples: Mapping from kind to example manifests (optional)
            guidance: Guidance documents in load order (optional)

        Returns:
            Fully built ResourceIndex
        """
        by_key: Dict[str, ResourceDefinition] = {}
        by_kind: Dict[str, ResourceDefinition] = {}
        by_alias: Dict[str, ResourceDefinition] = {}
        warnings: List[str] = []

        for definition in definitions:
            key = definition.key
            if key in by_key:
                warning = f"Duplicate resource definition: {key} ({definition.source_location})"
                warnings.append(warning)
                logger.warning(warning)
            by_key[key] = definition

        # secondary views only hold definitions that survived key collisions
        for definition in by_key.values():
            by_kind[definition.kind] = definition
            for alias in definition.short_aliases:
                by_alias[alias.lower()] = definition

        example_map: Dict[str, Tuple[ExampleManifest, ...]] = {}
        for kind, bucket in (examples or {}).items():
            example_map[kind] = tuple(bucket)

        index = cls(
            by_key=by_key,
            by_kind=by_kind,
            by_alias=by_alias,
            examples=example_map,
            guidance=tuple(guidance or ()),
            warnings=tuple(warnings),
        )
        logger.info(
            f"Built resource index: {len(by_key)} definitions, "
            f"{index.example_count} examples, {len(index.guidance)} guidance documents"
        )
        return index

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    @property
    def by_key(self) -> Mapping[str, ResourceDefinition]:
        return self._by_key

    @property
    def by_kind(self) -> Mapping[str, ResourceDefinition]:
        return self._by_kind

    @property
    def by_alias(self) -> Mapping[str, ResourceDefinition]:
        return self._by_alias

    @property
    def examples(self) -> Mapping[str, Tuple[ExampleManifest, ...]]:
        return self._examples

    @property
    def guidance(self) -> Tuple[GuidanceDocument, ...]:
        return self._guidance

    @property
    def example_count(self) -> int:
        return sum(len(bucket) for bucket in self._examples.values())

    def get(self, key: str) -> Optional[ResourceDefinition]:
        """Get a definition by composite key."""
        return self._by_key.get(key)

    def get_by_kind(self, kind: str) -> Optional[ResourceDefinition]:
        """Get a definition by exact kind."""
        return self._by_kind.get(kind)

    def get_by_alias(self, alias: str) -> Optional[ResourceDefinition]:
        """Get a definition by short alias (case-insensitive)."""
        return self._by_alias.get(alias.lower())

    def definitions(self) -> List[ResourceDefinition]:
        """All definitions in load order."""
        return list(self._by_key.values())

    def examples_for(self, kind: str) -> Tuple[ExampleManifest, ...]:
        """Examples for an exact kind, empty when there are none."""
        return self._examples.get(kind, ())

    def categories(self) -> List[str]:
        """Distinct definition categories in first-seen order."""
        seen = dict.fromkeys(
            d.category for d in self._by_key.values() if d.category
        )
        return list(seen)
