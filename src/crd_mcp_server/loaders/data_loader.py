"""Aggregate loading of definitions, examples and guidance."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from ..models import ExampleManifest, GuidanceDocument, ResourceDefinition
from .definitions import DefinitionLoader
from .examples import ExampleLoader
from .guidance import GuidanceLoader

logger = logging.getLogger(__name__)

EXPECTED_SUBDIRS = ("crds", "samples", "instructions")


@dataclass
class LoadStatistics:
    """Counts and problems from one load pass."""

    definition_count: int = 0
    example_count: int = 0
    guidance_count: int = 0
    load_time_ms: float = 0.0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "crds": self.definition_count,
            "samples": self.example_count,
            "instructions": self.guidance_count,
            "load_time_ms": round(self.load_time_ms, 1),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class LoadedData:
    """Everything read from a data directory, ready for indexing."""

    definitions: List[ResourceDefinition]
    examples: Dict[str, List[ExampleManifest]]
    guidance: List[GuidanceDocument]
    statistics: LoadStatistics


class DataLoader:
    """Run all loaders against one data directory.

    The directory is expected to contain ``crds/``, ``samples/`` and
    ``instructions/``; any of them may be missing, which is reported as a
    warning and yields an empty collection for that part.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def validate_layout(self) -> List[str]:
        """Check the directory layout.

        Returns:
            Warning messages for missing pieces
        """
        if not self.data_dir.is_dir():
            return [f"Data directory not found: {self.data_dir}"]

        return [
            f"Expected subdirectory '{name}' not found in {self.data_dir}"
            for name in EXPECTED_SUBDIRS
            if not (self.data_dir / name).is_dir()
        ]

    def load(self) -> LoadedData:
        """Load all data.

        Returns:
            LoadedData with statistics attached
        """
        start = time.perf_counter()
        logger.info(f"Loading data from {self.data_dir}")

        warnings = self.validate_layout()
        for warning in warnings:
            logger.warning(warning)

        definitions = DefinitionLoader(self.data_dir).load()
        examples = ExampleLoader(self.data_dir).load()
        guidance = GuidanceLoader(self.data_dir).load()

        statistics = LoadStatistics(
            definition_count=len(definitions.definitions),
            example_count=examples.count,
            guidance_count=len(guidance.documents),
            errors=definitions.errors + examples.errors + guidance.errors,
            warnings=warnings + guidance.warnings,
        )
        statistics.load_time_ms = (time.perf_counter() - start) * 1000

        logger.info(
            f"Data loading complete: {statistics.definition_count} CRDs, "
            f"{statistics.example_count} samples, {statistics.guidance_count} instructions "
            f"in {statistics.load_time_ms:.1f}ms"
        )
        for error in statistics.errors:
            logger.error(error)

        return LoadedData(
            definitions=definitions.definitions,
            examples=examples.examples,
            guidance=guidance.documents,
            statistics=statistics,
        )
