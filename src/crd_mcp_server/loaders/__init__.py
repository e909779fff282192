"""Loaders that read CRDs, sample manifests and instructions from disk."""

from .data_loader import DataLoader, LoadedData, LoadStatistics
from .definitions import DefinitionLoader, DefinitionLoadResult
from .examples import ExampleLoader, ExampleLoadResult
from .guidance import GuidanceLoader, GuidanceLoadResult
from .helpers import parse_frontmatter

__all__ = [
    "DataLoader",
    "LoadedData",
    "LoadStatistics",
    "DefinitionLoader",
    "DefinitionLoadResult",
    "ExampleLoader",
    "ExampleLoadResult",
    "GuidanceLoader",
    "GuidanceLoadResult",
    "parse_frontmatter",
]
