"""Initial scan plus watch-driven incremental reindexing of a project."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from code_graph.graph.indexer import GraphIndexer
from code_graph.indexing.scanner import ProjectScanner
from code_graph.indexing.watcher import ChangeType, ProjectWatcher

logger = logging.getLogger(__name__)


class ProjectIndexer:
    """Keeps a GraphStore in sync with a project directory.

    Reads are suspension points. When a read completes, its result is applied
    only if no ``stop()`` happened meanwhile (the generation is unchanged) and
    no newer event was dispatched for the same path. Because the check and the
    store write run on the loop thread without awaiting in between, nothing
    reaches the store after ``stop()`` returns.
    """

    def __init__(
        self,
        indexer: GraphIndexer,
        exclude_patterns: list[str] | None = None,
        extensions: list[str] | None = None,
    ) -> None:
        self.indexer = indexer
        self.exclude_patterns = exclude_patterns
        self.extensions = extensions
        self.root_path: Path | None = None
        self.scanner: ProjectScanner | None = None
        self._watcher: ProjectWatcher | None = None
        self._active = False
        self._generation = 0
        self._sequence: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_running

    async def start(self, root_path: Path | str | None, watch: bool = True) -> None:
        if self._active:
            logger.info("Project is already being indexed.")
            return
        if not root_path:
            logger.error("No active project to index.")
            return

        root = Path(root_path).resolve()
        if not root.is_dir():
            logger.error("Project root is not a directory: %s", root)
            return

        self._active = True
        self._generation += 1
        generation = self._generation
        self.root_path = root
        self.scanner = ProjectScanner(self.root_path, self.exclude_patterns, self.extensions)
        logger.info("Starting to index project at: %s", self.root_path)

        async def index_scanned(path: Path) -> None:
            rel = self.scanner.relative(path)
            await self._reindex(path, rel, generation, self._next_sequence(rel))

        await self.scanner.scan(index_scanned)

        if generation != self._generation:
            logger.info("Indexing stopped during initial scan of %s", self.root_path)
            return

        if watch:
            self._watcher = ProjectWatcher(
                self.root_path,
                self._on_file_event,
                asyncio.get_running_loop(),
                should_watch=self.scanner.should_index,
            )
            try:
                self._watcher.start()
            except OSError:
                logger.error("Could not watch %s", self.root_path, exc_info=True)
                self._watcher = None
                self._active = False
                return
            logger.info("Project indexing and watching started.")
        else:
            logger.info("Project indexed (watching disabled).")

    def stop(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        self._active = False
        self._generation += 1
        logger.info("Project indexing stopped.")

    async def wait_idle(self) -> None:
        """Wait until every dispatched reindex task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _next_sequence(self, rel: str) -> int:
        seq = self._sequence.get(rel, 0) + 1
        self._sequence[rel] = seq
        return seq

    def _on_file_event(self, change: ChangeType, path: Path) -> None:
        """Loop-thread entry point for watcher events."""
        if not self._active or self.scanner is None:
            logger.debug("Ignoring %s for %s: indexing inactive", change.value, path)
            return

        rel = self.scanner.relative(path)
        seq = self._next_sequence(rel)
        if change == ChangeType.UNLINK:
            removed = self.indexer.store.remove_file(rel)
            logger.info("File deleted: %s (%d nodes removed)", rel, removed)
            return

        logger.debug("File %s: %s", change.value, rel)
        task = asyncio.get_running_loop().create_task(self._reindex(path, rel, self._generation, seq))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reindex(self, path: Path, rel: str, generation: int, seq: int) -> None:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError:
            logger.error("Error processing file %s", path, exc_info=True)
            return

        if generation != self._generation or self._sequence.get(rel) != seq:
            logger.debug("Discarding stale read of %s", rel)
            return
        self.indexer.index_file(rel, text)
