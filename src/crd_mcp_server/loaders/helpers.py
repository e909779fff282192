"""Parsing helpers shared by the data loaders."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

_CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("database", ("redis", "postgres", "mysql", "mongodb", "database", "db")),
    ("messaging", ("kafka", "rabbit", "queue", "topic", "stream")),
    ("service", ("service", "api", "gateway", "proxy")),
    ("storage", ("storage", "volume", "bucket")),
    ("networking", ("network", "ingress", "route")),
    ("security", ("policy", "rbac", "auth", "cert")),
]

_CONTENT_TAG_PATTERNS = [
    re.compile(r"namespace:\s*(\w+)", re.IGNORECASE),
    re.compile(r"app:\s*(\w+)", re.IGNORECASE),
    re.compile(r"component:\s*(\w+)", re.IGNORECASE),
    re.compile(r"tier:\s*(\w+)", re.IGNORECASE),
    re.compile(r"version:\s*(\w+)", re.IGNORECASE),
    re.compile(r"environment:\s*(\w+)", re.IGNORECASE),
]


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """Extract YAML frontmatter from markdown content.

    Args:
        content: Markdown content with optional YAML frontmatter

    Returns:
        Tuple of (frontmatter_dict, content_without_frontmatter)
    """
    frontmatter: Dict[str, Any] = {}
    content_clean = content

    if content.startswith("---"):
        parts = content.split("---", 2)
        if len(parts) >= 3:
            frontmatter_str = parts[1].strip()
            content_clean = parts[2].lstrip()

            if frontmatter_str:
                try:
                    loaded = yaml.safe_load(frontmatter_str)
                except yaml.YAMLError as e:
                    logger.warning(f"Failed to parse frontmatter YAML: {e}")
                    loaded = None
                frontmatter = loaded if isinstance(loaded, dict) else {}

    return frontmatter, content_clean


def infer_category(kind: str) -> Optional[str]:
    """Infer a resource category from keywords in its kind name.

    Args:
        kind: Resource kind

    Returns:
        Category name, or None when no keyword matches
    """
    lowered = kind.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def extract_tags_from_content(content: str) -> List[str]:
    """Collect label-like values (app, tier, environment, ...) as tags."""
    tags: Dict[str, None] = {}
    for pattern in _CONTENT_TAG_PATTERNS:
        for match in pattern.finditer(content):
            value = match.group(1)
            if value and value != "default":
                tags[value.lower()] = None
    return list(tags)


def generate_description(file_name: str, content: Optional[str] = None) -> str:
    """Build a human-readable description from a file name.

    A comment in the first five lines of ``content`` replaces the generated
    text when it is longer and under 100 characters.
    """
    base_name = re.sub(r"\.(ya?ml|md|markdown|txt)$", "", file_name, flags=re.IGNORECASE)
    words = [w for w in re.split(r"[-_\s]+", base_name) if w]
    description = " ".join(w[:1].upper() + w[1:].lower() for w in words)

    if content:
        for line in content.split("\n")[:5]:
            match = re.match(r"^#\s*(.+)", line.strip())
            if match:
                comment = match.group(1)
                if len(description) < len(comment) < 100:
                    description = comment
                break

    return description


def extract_title_from_content(content: str, filename: str) -> str:
    """Extract title from the first H1 in the first ten lines, or the filename.

    Args:
        content: Markdown content
        filename: File name

    Returns:
        Title string
    """
    for line in content.split("\n")[:10]:
        h1_match = re.match(r"^#\s+(.+)$", line)
        if h1_match:
            return h1_match.group(1).strip()

    return generate_description(filename)


def find_files(root: Path, suffixes: Tuple[str, ...]) -> List[Path]:
    """Recursively list files under root with one of the given suffixes."""
    if not root.is_dir():
        return []
    return sorted(
        path for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in suffixes
    )
