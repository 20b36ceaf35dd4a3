"""Tests for the watchdog bridge: filtering and hand-off to the loop."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileMovedEvent

from code_graph.indexing.watcher import ChangeType, ProjectWatcher, _EventBridge, is_hidden


def _watcher(tmp_path: Path, should_watch=None) -> tuple[ProjectWatcher, MagicMock]:
    loop = MagicMock()
    watcher = ProjectWatcher(tmp_path, on_event=MagicMock(), loop=loop, should_watch=should_watch)
    return watcher, loop


def test_is_hidden(tmp_path):
    assert is_hidden(tmp_path / ".git" / "config", tmp_path)
    assert is_hidden(tmp_path / "src" / ".env.ts", tmp_path)
    assert not is_hidden(tmp_path / "src" / "a.ts", tmp_path)


def test_hidden_root_itself_is_not_hidden(tmp_path):
    root = tmp_path / ".workspace"
    assert not is_hidden(root / "a.ts", root)


def test_emit_schedules_on_loop(tmp_path):
    watcher, loop = _watcher(tmp_path)
    watcher.emit(ChangeType.CHANGE, str(watcher.root_path / "a.ts"))
    loop.call_soon_threadsafe.assert_called_once_with(
        watcher.on_event, ChangeType.CHANGE, watcher.root_path / "a.ts",
    )


def test_emit_decodes_bytes_paths(tmp_path):
    watcher, loop = _watcher(tmp_path)
    watcher.emit(ChangeType.ADD, str(watcher.root_path / "b.ts").encode())
    assert loop.call_soon_threadsafe.call_args.args[2] == watcher.root_path / "b.ts"


def test_emit_skips_dotfiles_and_filtered_paths(tmp_path):
    watcher, loop = _watcher(tmp_path, should_watch=lambda p: p.suffix == ".ts")
    watcher.emit(ChangeType.ADD, str(watcher.root_path / ".cache" / "a.ts"))
    watcher.emit(ChangeType.ADD, str(watcher.root_path / "notes.md"))
    loop.call_soon_threadsafe.assert_not_called()


def test_emit_after_loop_closed_is_dropped(tmp_path):
    watcher, loop = _watcher(tmp_path)
    loop.call_soon_threadsafe.side_effect = RuntimeError("Event loop is closed")
    watcher.emit(ChangeType.UNLINK, str(watcher.root_path / "a.ts"))


def test_bridge_maps_move_to_unlink_then_add(tmp_path):
    watcher, loop = _watcher(tmp_path)
    bridge = _EventBridge(watcher)
    root = watcher.root_path
    bridge.on_moved(FileMovedEvent(str(root / "old.ts"), str(root / "new.ts")))
    calls = [c.args[1:] for c in loop.call_soon_threadsafe.call_args_list]
    assert calls == [(ChangeType.UNLINK, root / "old.ts"), (ChangeType.ADD, root / "new.ts")]


def test_bridge_ignores_directories(tmp_path):
    watcher, loop = _watcher(tmp_path)
    bridge = _EventBridge(watcher)
    bridge.on_created(DirCreatedEvent(str(watcher.root_path / "src")))
    loop.call_soon_threadsafe.assert_not_called()
    bridge.on_created(FileCreatedEvent(str(watcher.root_path / "src" / "a.ts")))
    assert loop.call_soon_threadsafe.call_args.args[1] == ChangeType.ADD


def test_start_and_stop(tmp_path):
    watcher, _ = _watcher(tmp_path)
    watcher.start()
    assert watcher.is_running
    watcher.stop()
    assert not watcher.is_running
