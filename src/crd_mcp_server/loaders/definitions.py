"""Load resource definitions from CRD YAML files."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..models import ResourceDefinition, Scope
from .helpers import find_files, generate_description, infer_category

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")


@dataclass
class DefinitionLoadResult:
    """Definitions found on disk plus per-file problems."""

    definitions: List[ResourceDefinition] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def is_crd_document(doc: Any) -> bool:
    """Whether a parsed YAML document is a CustomResourceDefinition."""
    if not isinstance(doc, dict) or doc.get("kind") != "CustomResourceDefinition":
        return False
    spec = doc.get("spec")
    if not isinstance(spec, dict) or not spec.get("group"):
        return False
    names = spec.get("names")
    return isinstance(names, dict) and bool(names.get("kind"))


def _extract_description(doc: Dict[str, Any]) -> str:
    annotations = (doc.get("metadata") or {}).get("annotations") or {}
    if annotations.get("description"):
        return str(annotations["description"])

    versions = doc["spec"].get("versions") or []
    if versions and isinstance(versions[0], dict):
        schema = (versions[0].get("schema") or {}).get("openAPIV3Schema") or {}
        if isinstance(schema, dict) and schema.get("description"):
            return str(schema["description"])

    return generate_description(doc["spec"]["names"]["kind"])


def definition_from_document(doc: Dict[str, Any], source: str) -> ResourceDefinition:
    """Build a ResourceDefinition from a parsed CRD document.

    Args:
        doc: CRD document that passed ``is_crd_document``
        source: File the document came from

    Returns:
        ResourceDefinition

    Raises:
        ValueError: If scope is not Namespaced or Cluster
    """
    spec = doc["spec"]
    names = spec["names"]
    kind = str(names["kind"])
    versions = [
        str(v["name"]) for v in spec.get("versions") or []
        if isinstance(v, dict) and v.get("name")
    ] or ["v1"]
    short_names = names.get("shortNames") or []

    return ResourceDefinition(
        group=str(spec["group"]),
        kind=kind,
        plural=str(names.get("plural") or kind.lower()),
        singular=names.get("singular"),
        short_aliases=tuple(str(n) for n in short_names),
        scope=Scope(spec.get("scope") or Scope.NAMESPACED.value),
        versions=tuple(versions),
        category=infer_category(kind),
        description=_extract_description(doc),
        source_location=source,
    )


class DefinitionLoader:
    """Scan ``<data_dir>/crds`` for CustomResourceDefinition documents."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.crd_dir = self.data_dir / "crds"

    def load(self) -> DefinitionLoadResult:
        """Load every CRD document below the crds directory.

        Returns:
            DefinitionLoadResult; unreadable files and malformed documents
            are reported as errors
        """
        start = time.perf_counter()
        result = DefinitionLoadResult()

        files = find_files(self.crd_dir, YAML_SUFFIXES)
        logger.debug(f"Found {len(files)} CRD files in {self.crd_dir}")

        for file_path in files:
            try:
                documents = list(yaml.safe_load_all(file_path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                result.errors.append(f"Failed to read file {file_path}: {e}")
                continue

            for doc in documents:
                if not is_crd_document(doc):
                    continue
                try:
                    definition = definition_from_document(doc, str(file_path))
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    result.errors.append(f"Failed to process CRD in {file_path}: {e}")
                    continue

                result.definitions.append(definition)
                logger.debug(f"Loaded CRD: {definition.key} from {file_path}")

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"Loaded {len(result.definitions)} CRDs in {elapsed:.1f}ms")
        if result.errors:
            logger.warning(f"CRD loading had {len(result.errors)} errors")
        return result

