"""
命令文件监视器

监视命令源文件的新增、修改与删除，只做路径级别的变化检测。
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple

from watchfiles import Change, PythonFilter, awatch

FileCallback = Callable[[str], Awaitable[None]]


def normalize_path(path: str) -> str:
    return str(Path(path).resolve())


class CommandFileWatcher:
    """
    命令文件监视器

    监视根目录由被跟踪文件的父目录组成，新增的文件不在已有根目录下时会重启监视循环。
    """

    def __init__(self, watch_filter: Optional[Callable[[Change, str], bool]] = None):
        self.logger = logging.getLogger("umeko.commands.watcher")
        self.watch_filter = watch_filter or PythonFilter()

        self._paths: Set[str] = set()
        self._roots: Set[str] = set()
        self._on_added: Optional[FileCallback] = None
        self._on_changed: Optional[FileCallback] = None
        self._on_deleted: Optional[FileCallback] = None

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    def bind(
        self,
        on_added: Optional[FileCallback] = None,
        on_changed: Optional[FileCallback] = None,
        on_deleted: Optional[FileCallback] = None
    ) -> None:
        """
        绑定文件变化回调

        Args:
            on_added: 新文件出现
            on_changed: 被跟踪的文件内容变化
            on_deleted: 被跟踪的文件被删除
        """
        self._on_added = on_added
        self._on_changed = on_changed
        self._on_deleted = on_deleted

    @property
    def tracked_paths(self) -> frozenset:
        return frozenset(self._paths)

    @property
    def roots(self) -> frozenset:
        return frozenset(self._roots)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_tracked(self, path: str) -> bool:
        return normalize_path(path) in self._paths

    def add(self, path: str) -> None:
        """将文件加入监视集合"""
        path = normalize_path(path)
        if path in self._paths:
            return

        self._paths.add(path)
        self.logger.debug(f"开始监视命令文件: {path}")

        root = os.path.dirname(path)
        if not self._is_covered(root):
            self._roots.add(root)
            if self.is_running:
                self._restart()

    def _is_covered(self, directory: str) -> bool:
        candidate = Path(directory)
        return any(candidate == Path(root) or candidate.is_relative_to(root) for root in self._roots)

    def start(self) -> None:
        """启动监视循环，需要在事件循环中调用"""
        if self.is_running:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(sorted(self._roots), self._stop_event))
        self.logger.info(f"命令文件监视已启动，根目录: {len(self._roots)} 个")

    def _restart(self) -> None:
        self.logger.debug("监视根目录变化，重启监视循环")
        if self._stop_event is not None:
            self._stop_event.set()
        self._task = None
        self.start()

    async def stop(self) -> None:
        """停止监视循环"""
        if self._stop_event is not None:
            self._stop_event.set()

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self.logger.info("命令文件监视已停止")

    async def _run(self, roots: Iterable[str], stop_event: asyncio.Event) -> None:
        roots = [root for root in roots if os.path.isdir(root)]
        if not roots:
            self.logger.debug("没有可监视的目录")
            return

        try:
            async for changes in awatch(*roots, watch_filter=self.watch_filter, stop_event=stop_event):
                await self.handle_changes(changes)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"命令文件监视循环异常退出: {e}", exc_info=True)

    async def handle_changes(self, changes: Set[Tuple[Change, str]]) -> None:
        """
        分发一批文件变化

        同一路径在一批变化中可能同时出现删除和新增（编辑器替换保存），
        这里以文件当前是否存在为准。被跟踪的文件在删除后重新出现时也按内容变化处理。

        Args:
            changes: watchfiles 产生的变化集合
        """
        grouped: Dict[str, Set[Change]] = {}
        for change, path in changes:
            grouped.setdefault(normalize_path(path), set()).add(change)

        for path in sorted(grouped):
            kinds = grouped[path]
            tracked = path in self._paths
            exists = os.path.isfile(path)

            if not exists:
                callback = self._on_deleted if tracked else None
            elif tracked:
                callback = self._on_changed
            elif Change.added in kinds:
                callback = self._on_added
            else:
                callback = None

            if callback is None:
                continue

            try:
                await callback(path)
            except Exception as e:
                self.logger.error(f"处理文件变化失败: {path} - {e}", exc_info=True)
