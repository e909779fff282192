"""Load example manifests from sample YAML files."""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..models import Complexity, ExampleManifest
from .helpers import extract_tags_from_content, find_files, generate_description

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")

_FILENAME_TAGS = [
    (("simple", "basic"), "simple"),
    (("advanced", "complex"), "advanced"),
    (("prod", "production"), "production"),
    (("dev", "development"), "development"),
    (("test", "testing"), "testing"),
]


@dataclass
class ExampleLoadResult:
    """Examples grouped by kind plus per-file problems."""

    examples: Dict[str, List[ExampleManifest]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return sum(len(bucket) for bucket in self.examples.values())


def is_manifest(doc: Any) -> bool:
    """Whether a parsed YAML document looks like a Kubernetes manifest."""
    return (
        isinstance(doc, dict)
        and isinstance(doc.get("apiVersion"), str)
        and isinstance(doc.get("kind"), str)
        and isinstance(doc.get("metadata"), dict)
    )


def tags_from_filename(file_name: str) -> List[str]:
    """Tags implied by words in a sample's file name."""
    base_name = Path(file_name).stem
    return [
        tag for keywords, tag in _FILENAME_TAGS
        if any(keyword in base_name for keyword in keywords)
    ]


def determine_complexity(doc: Dict[str, Any], file_content: str) -> Complexity:
    """Score a manifest's structure and size into a complexity level.

    A score of 5 or more is advanced, 2 or more intermediate.
    """
    content = json.dumps(doc, default=str)
    score = 0

    if "resources" in content:
        score += 1
    if "securityContext" in content:
        score += 1

    pod_spec = (((doc.get("spec") or {}).get("template") or {}).get("spec") or {})
    if isinstance(pod_spec, dict):
        if len(pod_spec.get("containers") or []) > 1:
            score += 2
        if pod_spec.get("initContainers"):
            score += 2

    if "volumeMounts" in content:
        score += 1
    if "env:" in file_content:
        score += 1
    if "serviceAccount" in content:
        score += 1
    if doc.get("kind") == "Ingress" or "networkPolicy" in content:
        score += 2
    if "configMap" in content or "secret" in content:
        score += 1

    lines = len(file_content.split("\n"))
    if lines > 100:
        score += 2
    elif lines > 50:
        score += 1

    if score >= 5:
        return Complexity.ADVANCED
    if score >= 2:
        return Complexity.INTERMEDIATE
    return Complexity.SIMPLE


def describe_sample(doc: Dict[str, Any], file_name: str, file_content: str) -> str:
    """Description from an annotation, leading comments, or the file name."""
    annotations = doc["metadata"].get("annotations") or {}
    if isinstance(annotations, dict) and annotations.get("description"):
        return str(annotations["description"])

    comment_lines = [
        line.strip() for line in file_content.split("\n")
        if line.strip().startswith("#")
    ][:3]
    if comment_lines:
        description = " ".join(line.lstrip("#").strip() for line in comment_lines).strip()
        if description and "yaml" not in description.lower():
            return description

    name = doc["metadata"].get("name")
    text = f"{generate_description(Path(file_name).stem)} - {doc['kind']} example"
    if name:
        text += f" ({name})"
    return text


def example_from_document(
    doc: Dict[str, Any],
    file_path: Path,
    file_content: str,
) -> ExampleManifest:
    """Build an ExampleManifest from a parsed manifest document."""
    tags = extract_tags_from_content(file_content) + tags_from_filename(file_path.name)
    return ExampleManifest(
        kind=doc["kind"],
        raw_content=doc,
        description=describe_sample(doc, file_path.name, file_content),
        complexity=determine_complexity(doc, file_content),
        tags=tuple(tags),
        api_version=doc["apiVersion"],
        metadata=doc["metadata"],
        source_location=str(file_path),
    )


class ExampleLoader:
    """Scan ``<data_dir>/samples`` for example manifests."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.sample_dir = self.data_dir / "samples"

    def load(self) -> ExampleLoadResult:
        """Load every manifest document below the samples directory.

        Returns:
            ExampleLoadResult with examples grouped by kind in load order
        """
        start = time.perf_counter()
        result = ExampleLoadResult()

        files = find_files(self.sample_dir, YAML_SUFFIXES)
        logger.debug(f"Found {len(files)} sample files in {self.sample_dir}")

        for file_path in files:
            try:
                file_content = file_path.read_text(encoding="utf-8")
                documents = list(yaml.safe_load_all(file_content))
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                result.errors.append(f"Failed to read sample file {file_path}: {e}")
                continue

            for doc in documents:
                if not is_manifest(doc):
                    continue
                try:
                    example = example_from_document(doc, file_path, file_content)
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    result.errors.append(f"Failed to process sample in {file_path}: {e}")
                    continue

                result.examples.setdefault(example.kind, []).append(example)
                logger.debug(
                    f"Loaded sample: {example.kind}/{doc['metadata'].get('name', 'unnamed')} "
                    f"from {file_path}"
                )

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            f"Loaded {result.count} samples for {len(result.examples)} resource types "
            f"in {elapsed:.1f}ms"
        )
        if result.errors:
            logger.warning(f"Sample loading had {len(result.errors)} errors")
        return result
