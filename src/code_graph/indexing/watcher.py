"""Watchdog observer that forwards file events onto an asyncio loop."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


def is_hidden(path: Path, root: Path) -> bool:
    """True if any component of ``path`` below ``root`` is a dotfile."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part.startswith(".") for part in parts)


class _EventBridge(FileSystemEventHandler):
    """Runs on the observer thread; hands events to the loop thread."""

    def __init__(self, watcher: ProjectWatcher) -> None:
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.emit(ChangeType.ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.emit(ChangeType.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.emit(ChangeType.UNLINK, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.emit(ChangeType.UNLINK, event.src_path)
            self.watcher.emit(ChangeType.ADD, event.dest_path)


class ProjectWatcher:
    """Recursive watch of a project root, ignoring dotfiles and filtered paths."""

    def __init__(
        self,
        root_path: Path,
        on_event: Callable[[ChangeType, Path], None],
        loop: asyncio.AbstractEventLoop,
        should_watch: Callable[[Path], bool] | None = None,
    ) -> None:
        self.root_path = root_path.resolve()
        self.on_event = on_event
        self.loop = loop
        self.should_watch = should_watch or (lambda _path: True)
        self._observer: Observer | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def emit(self, change: ChangeType, src_path: str | bytes) -> None:
        path = Path(os.fsdecode(src_path))
        if is_hidden(path, self.root_path) or not self.should_watch(path):
            return
        try:
            self.loop.call_soon_threadsafe(self.on_event, change, path)
        except RuntimeError:
            # Loop already closed; the session is shutting down
            logger.debug("Dropped %s event for %s", change.value, path)

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(_EventBridge(self), str(self.root_path), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("File watcher started for %s", self.root_path)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info("File watcher stopped for %s", self.root_path)
