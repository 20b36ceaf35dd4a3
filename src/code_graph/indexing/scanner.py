"""Depth-first project walk filtered by exclude patterns and extensions."""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from code_graph.config import settings

logger = logging.getLogger(__name__)


def _list_dir(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


class ProjectScanner:
    """Enumerates supported source files under a root directory."""

    def __init__(
        self,
        root_path: Path,
        exclude_patterns: list[str] | None = None,
        extensions: list[str] | None = None,
    ) -> None:
        self.root_path = root_path.resolve()
        self.exclude_patterns = exclude_patterns if exclude_patterns is not None else settings.indexer_exclude_patterns
        self.extensions = set(extensions if extensions is not None else settings.indexer_extensions)

    def is_excluded(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pat) for pat in self.exclude_patterns)

    def is_supported(self, path: Path) -> bool:
        return path.suffix in self.extensions

    def relative(self, path: Path) -> str:
        """POSIX path relative to the root; used as the File node id."""
        try:
            return path.resolve().relative_to(self.root_path).as_posix()
        except ValueError:
            return path.as_posix()

    def should_index(self, path: Path) -> bool:
        """Same filter as the walk, applied to a single path (used by the watcher)."""
        if not self.is_supported(path):
            return False
        try:
            parts = path.resolve().relative_to(self.root_path).parts
        except ValueError:
            return False
        return not any(self.is_excluded(part) for part in parts[:-1])

    async def scan(self, on_file: Callable[[Path], Awaitable[None]]) -> int:
        """Walk the tree, awaiting ``on_file`` for each supported file. Returns the file count."""
        count = await self._scan_directory(self.root_path, on_file)
        logger.info("Scanned %d files under %s", count, self.root_path)
        return count

    async def _scan_directory(self, directory: Path, on_file: Callable[[Path], Awaitable[None]]) -> int:
        try:
            entries = await asyncio.to_thread(_list_dir, directory)
        except OSError:
            logger.error("Error scanning directory %s", directory, exc_info=True)
            return 0

        count = 0
        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                if self.is_excluded(entry.name):
                    logger.debug("Skipping %s", entry)
                    continue
                count += await self._scan_directory(entry, on_file)
            elif entry.is_file() and self.is_supported(entry):
                await on_file(entry)
                count += 1
        return count
