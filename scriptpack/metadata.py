"""Userscript header metadata extraction."""

import re
from dataclasses import dataclass, fields
from pathlib import Path

from loguru import logger

from scriptpack.errors import FilesystemError, MetadataMissingError

METADATA_TAGS = ("author", "description", "name", "version")

# Tag is case-sensitive; the value must start with an ASCII letter, digit or space
# and runs to the end of the line untouched.
_TAG_PATTERNS = {
    tag: re.compile(rf"@{tag}\s+([A-Za-z0-9 ].*)$")
    for tag in METADATA_TAGS
}


@dataclass(frozen=True)
class ScriptMetadata:
    """Fields read from a userscript's `// @tag value` header lines."""

    author: str = ""
    description: str = ""
    name: str = ""
    version: str = ""

    def missing_fields(self) -> list[str]:
        return [f.name for f in fields(self) if not getattr(self, f.name)]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


def parse_metadata(text: str) -> ScriptMetadata:
    """
    Extract metadata tags from userscript text.

    The first matching line wins for each tag; tags that never match are
    returned as empty strings.
    """
    found: dict[str, str] = {}
    for line in text.splitlines():
        for tag, pattern in _TAG_PATTERNS.items():
            if tag in found:
                continue
            match = pattern.search(line)
            if match:
                found[tag] = match.group(1)
        if len(found) == len(_TAG_PATTERNS):
            break
    return ScriptMetadata(**found)


def extract_metadata(path: Path) -> ScriptMetadata:
    """Read a userscript file and extract its header metadata."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(f"Cannot read userscript {path}: {e}") from e

    metadata = parse_metadata(text)
    logger.debug(f"Extracted metadata from {path}: {metadata}")
    return metadata


def require_complete(metadata: ScriptMetadata, source: str | None = None) -> ScriptMetadata:
    """Raise MetadataMissingError unless all four tags are present."""
    missing = metadata.missing_fields()
    if missing:
        raise MetadataMissingError(missing, source=source)
    return metadata
