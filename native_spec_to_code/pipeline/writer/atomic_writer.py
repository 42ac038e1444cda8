"""
Atomic file writer for generated code.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from .base import GeneratedFileError, GenerateResult, extract_hash

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Handles atomic file writes of generated files.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def write(self, path: Path, content: str) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write

        Raises:
            GeneratedFileError: If the target exists but is not a regular file
            OSError: If file operations fail
        """
        if path.exists() and not path.is_file():
            raise GeneratedFileError(f"Output path is not a regular file: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def write_if_absent(self, path: Path, content: str) -> bool:
        """Write content only if the file doesn't exist.

        Returns:
            True if the file was written, False if it already exists
        """
        if path.exists():
            return False
        self.write(path, content)
        return True

    def write_result(self, result: GenerateResult) -> bool:
        """Write a generated file according to its overwrite policy.

        Regenerated files whose content is already on disk are left untouched.

        Returns:
            True if the file was written
        """
        if not result.overwrite:
            written = self.write_if_absent(result.path, result.content)
            if not written:
                logger.debug("Keeping existing scaffold %s", result.path)
            return written

        if result.path.is_file():
            existing = result.path.read_text(encoding="utf-8")
            if existing == result.content:
                logger.debug("Up to date (%s): %s", extract_hash(existing), result.path)
                return False

        self.write(result.path, result.content)
        logger.debug("Wrote %s", result.path)
        return True
