"""Guidance document loading.

This module scans the instructions directory for Markdown and text files,
parses their YAML frontmatter, and turns each into a GuidanceDocument with
title, tags, declared and detected resource kinds, category and priority.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models import GuidanceDocument
from .helpers import (
    extract_tags_from_content,
    extract_title_from_content,
    find_files,
    parse_frontmatter,
)

logger = logging.getLogger(__name__)

GUIDANCE_SUFFIXES = (".md", ".txt", ".markdown")

_SKIP_WORDS = frozenset({
    "the", "and", "for", "with", "how", "guide", "docs", "documentation",
    "example", "sample", "template", "readme", "instructions",
})

# keyword pattern -> kind name recorded as detected
_KIND_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"redis"), "redis"),
    (re.compile(r"postgres|postgresql"), "postgresql"),
    (re.compile(r"mysql"), "mysql"),
    (re.compile(r"mongodb|mongo"), "mongodb"),
    (re.compile(r"kafka"), "kafka"),
    (re.compile(r"rabbitmq|rabbit"), "rabbitmq"),
    (re.compile(r"queue"), "queue"),
    (re.compile(r"service"), "service"),
    (re.compile(r"api.*gateway|gateway"), "gateway"),
    (re.compile(r"ingress"), "ingress"),
    (re.compile(r"storage"), "storage"),
    (re.compile(r"volume"), "volume"),
    (re.compile(r"bucket"), "bucket"),
    (re.compile(r"rbac"), "rbac"),
    (re.compile(r"policy"), "policy"),
    (re.compile(r"certificate|cert"), "certificate"),
]

_API_VERSION_PATTERN = re.compile(r"apiVersion:\s*(\S+)", re.IGNORECASE)
_KIND_PATTERN = re.compile(r"kind:\s*(\S+)", re.IGNORECASE)

STANDARD_KINDS = frozenset({
    "Pod", "Service", "Deployment", "ReplicaSet", "StatefulSet", "DaemonSet",
    "Job", "CronJob", "ConfigMap", "Secret", "PersistentVolume",
    "PersistentVolumeClaim", "Ingress", "NetworkPolicy", "ServiceAccount",
    "Role", "RoleBinding", "ClusterRole", "ClusterRoleBinding", "Namespace",
})


@dataclass
class GuidanceLoadResult:
    """Guidance documents in load order plus per-file problems."""

    documents: List[GuidanceDocument] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def detect_kinds(content: str) -> List[str]:
    """Infer the resource kinds a guidance body talks about.

    Three sources: keyword patterns, API groups of non-core ``apiVersion``
    values, and ``kind:`` values that are not built-in Kubernetes kinds.

    Args:
        content: Guidance body text

    Returns:
        Lowercased kind hints, de-duplicated in first-seen order
    """
    kinds: Dict[str, None] = {}
    lowered = content.lower()

    for pattern, kind in _KIND_PATTERNS:
        if pattern.search(lowered):
            kinds[kind] = None

    for match in _API_VERSION_PATTERN.finditer(content):
        api_version = match.group(1)
        if api_version.startswith("v1") or api_version.startswith("apps/"):
            continue
        group = api_version.split("/")[0]
        if group and group != "v1":
            kinds[group] = None

    for match in _KIND_PATTERN.finditer(content):
        kind = match.group(1)
        if kind not in STANDARD_KINDS:
            kinds[kind.lower()] = None

    return list(kinds)


def extract_tags(frontmatter: Dict[str, Any], content: str, file_name: str) -> List[str]:
    """Collect lowercased tags from frontmatter, content and file name."""
    tags: Dict[str, None] = {}

    raw_tags = frontmatter.get("tags", [])
    if isinstance(raw_tags, str):
        raw_tags = [raw_tags]
    if isinstance(raw_tags, list):
        for tag in raw_tags:
            if isinstance(tag, str):
                tags[tag.lower()] = None

    category = frontmatter.get("category")
    if isinstance(category, str):
        tags[category.lower()] = None

    for tag in extract_tags_from_content(content):
        tags[tag] = None

    for word in re.split(r"[-_\s]+", Path(file_name).stem):
        word = word.lower()
        if len(word) > 2 and word not in _SKIP_WORDS:
            tags[word] = None

    return list(tags)


def _declared_kinds(frontmatter: Dict[str, Any]) -> List[str]:
    declared = frontmatter.get("applicableCRDs", frontmatter.get("applicable_kinds", []))
    if isinstance(declared, str):
        declared = [declared]
    if not isinstance(declared, list):
        return []
    return [str(kind) for kind in declared if kind]


def _priority(frontmatter: Dict[str, Any]) -> Optional[int]:
    value = frontmatter.get("priority", 0)
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class GuidanceLoader:
    """Load guidance documents from ``<data_dir>/instructions``."""

    def __init__(self, data_dir: Path):
        """Initialize guidance loader.

        Args:
            data_dir: Root data directory
        """
        self.data_dir = Path(data_dir)
        self.instructions_path = self.data_dir / "instructions"

    def load(self) -> GuidanceLoadResult:
        """Scan the instructions directory.

        Returns:
            GuidanceLoadResult with documents in load order
        """
        start = time.perf_counter()
        result = GuidanceLoadResult()

        if not self.instructions_path.is_dir():
            logger.warning(f"Instructions directory not found: {self.instructions_path}")
            return result

        for file_path in find_files(self.instructions_path, GUIDANCE_SUFFIXES):
            try:
                document = self._load_guidance_file(file_path, result.warnings)
            except (OSError, UnicodeDecodeError) as e:
                result.errors.append(f"Failed to read instruction file {file_path}: {e}")
                continue
            result.documents.append(document)
            logger.debug(f"Loaded instruction: {document.title} from {file_path}")

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"Loaded {len(result.documents)} instruction documents in {elapsed:.1f}ms")
        if result.errors:
            logger.warning(f"Instruction loading had {len(result.errors)} errors")
        return result

    def _load_guidance_file(self, file_path: Path, warnings: List[str]) -> GuidanceDocument:
        """Parse a single guidance file.

        Args:
            file_path: Path to guidance file
            warnings: List collecting non-fatal problems

        Returns:
            GuidanceDocument
        """
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()

        frontmatter, body = parse_frontmatter(content)

        title = frontmatter.get("title")
        if not isinstance(title, str) or not title:
            title = extract_title_from_content(body, file_path.name)

        category = frontmatter.get("category")
        category = str(category) if category else None

        priority = _priority(frontmatter)
        if priority is None:
            warnings.append(
                f"Invalid priority {frontmatter.get('priority')!r} in {file_path}, using 0"
            )
            priority = 0

        return GuidanceDocument(
            title=title,
            body_text=body,
            declared_kinds=tuple(_declared_kinds(frontmatter)),
            detected_kinds=tuple(detect_kinds(body)),
            tags=tuple(extract_tags(frontmatter, body, file_path.name)),
            category=category,
            priority=priority,
            source_location=str(file_path),
            frontmatter=frontmatter,
        )
