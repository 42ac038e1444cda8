"""
Generated file descriptions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

GENERATED_HASH_MARKER = "@generated-hash"

_HASH_PATTERN = re.compile(re.escape(GENERATED_HASH_MARKER) + r"\s+([0-9a-f]{64})")


class GeneratedFileError(Exception):
    """Raised when a generated file cannot be written.

    This can happen when:
    - The target path exists but is not a regular file
    - The content fails validation
    """


@dataclass(frozen=True)
class GenerateResult:
    """A file produced by a backend.

    Attributes:
        path: Target path
        content: Complete file content
        overwrite: False for scaffolding that is written only once and then hand-edited
    """

    path: Path
    content: str
    overwrite: bool = True


def hash_sentinel(content_hash: str, comment: str = "//") -> str:
    """Sentinel comment line carrying a content hash."""
    return f"{comment} {GENERATED_HASH_MARKER} {content_hash}"


def extract_hash(content: str) -> str | None:
    """Content hash recorded in a generated file, if any."""
    match = _HASH_PATTERN.search(content)
    return match.group(1) if match else None
