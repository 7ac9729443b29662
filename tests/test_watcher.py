"""
命令文件监视器测试
"""

import os
from unittest.mock import AsyncMock

import pytest
from watchfiles import Change

from umeko.commands import CommandFileWatcher
from umeko.commands.watcher import normalize_path


class TestWatcherTracking:
    """测试监视集合与根目录"""

    def setup_method(self):
        self.watcher = CommandFileWatcher()

    def test_add_registers_parent_as_root(self, tmp_path):
        path = tmp_path / "ping.py"
        self.watcher.add(str(path))

        assert self.watcher.is_tracked(str(path))
        assert self.watcher.roots == frozenset({normalize_path(str(tmp_path))})

    def test_nested_directory_reuses_root(self, tmp_path):
        nested = tmp_path / "music"
        nested.mkdir()

        self.watcher.add(str(tmp_path / "ping.py"))
        self.watcher.add(str(nested / "play.py"))

        assert len(self.watcher.roots) == 1
        assert len(self.watcher.tracked_paths) == 2

    @pytest.mark.asyncio
    async def test_start_without_roots_and_stop(self):
        self.watcher.start()
        await self.watcher.stop()

        assert not self.watcher.is_running

    @pytest.mark.asyncio
    async def test_start_and_stop_with_root(self, tmp_path):
        self.watcher.add(str(tmp_path / "ping.py"))

        self.watcher.start()
        assert self.watcher.is_running

        await self.watcher.stop()
        assert not self.watcher.is_running


class TestWatcherChanges:
    """测试变化分发"""

    def setup_method(self):
        self.watcher = CommandFileWatcher()
        self.on_added = AsyncMock()
        self.on_changed = AsyncMock()
        self.on_deleted = AsyncMock()
        self.watcher.bind(self.on_added, self.on_changed, self.on_deleted)

    def _write(self, tmp_path, name):
        path = tmp_path / name
        path.write_text("VALUE = 1\n", encoding="utf-8")
        return normalize_path(str(path))

    @pytest.mark.asyncio
    async def test_modified_tracked_file(self, tmp_path):
        path = self._write(tmp_path, "ping.py")
        self.watcher.add(path)

        await self.watcher.handle_changes({(Change.modified, path)})

        self.on_changed.assert_called_once_with(path)
        self.on_added.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_file(self, tmp_path):
        path = self._write(tmp_path, "new.py")

        await self.watcher.handle_changes({(Change.added, path)})

        self.on_added.assert_called_once_with(path)
        self.on_changed.assert_not_called()

    @pytest.mark.asyncio
    async def test_tracked_file_deleted(self, tmp_path):
        path = normalize_path(str(tmp_path / "gone.py"))
        self.watcher.add(path)

        await self.watcher.handle_changes({(Change.deleted, path)})

        self.on_deleted.assert_called_once_with(path)

    @pytest.mark.asyncio
    async def test_untracked_file_deleted(self, tmp_path):
        path = normalize_path(str(tmp_path / "gone.py"))

        await self.watcher.handle_changes({(Change.deleted, path)})

        self.on_deleted.assert_not_called()

    @pytest.mark.asyncio
    async def test_atomic_save_treated_as_change(self, tmp_path):
        path = self._write(tmp_path, "ping.py")
        self.watcher.add(path)

        await self.watcher.handle_changes({(Change.deleted, path), (Change.added, path)})

        self.on_changed.assert_called_once_with(path)
        self.on_deleted.assert_not_called()
        self.on_added.assert_not_called()

    @pytest.mark.asyncio
    async def test_tracked_file_recreated_treated_as_change(self, tmp_path):
        path = normalize_path(str(tmp_path / "ping.py"))
        self.watcher.add(path)

        await self.watcher.handle_changes({(Change.deleted, path)})
        self._write(tmp_path, "ping.py")
        await self.watcher.handle_changes({(Change.added, path)})

        self.on_deleted.assert_called_once_with(path)
        self.on_changed.assert_called_once_with(path)
        self.on_added.assert_not_called()
        assert self.watcher.is_tracked(path)

    @pytest.mark.asyncio
    async def test_untracked_modification_ignored(self, tmp_path):
        path = self._write(tmp_path, "other.py")

        await self.watcher.handle_changes({(Change.modified, path)})

        self.on_changed.assert_not_called()
        self.on_added.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_failure_does_not_stop_batch(self, tmp_path):
        first = self._write(tmp_path, "a.py")
        second = self._write(tmp_path, "b.py")
        self.watcher.add(first)
        self.watcher.add(second)
        self.on_changed.side_effect = [RuntimeError("失败"), None]

        await self.watcher.handle_changes({
            (Change.modified, first),
            (Change.modified, second),
        })

        assert self.on_changed.call_count == 2

    @pytest.mark.asyncio
    async def test_unbound_callbacks(self, tmp_path):
        watcher = CommandFileWatcher()
        path = self._write(tmp_path, "ping.py")

        await watcher.handle_changes({(Change.added, path)})

        assert os.path.exists(path)
