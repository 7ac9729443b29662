"""
命令注册系统

管理所有命令的注册、查找、导出与热重载：
- 按种类分表存储命令
- 替换同名命令时先销毁旧命令再加载新命令
- 文件变化的防抖重载
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional, Set

from umeko.core.error_handler import CommandDependencyError, CommandLifecycleError
from umeko.core.lifecycle import BotPlugin, LoadableState
from .base_command import (
    CommandBase,
    CommandType,
    SlashCommand,
    UserContextMenuCommand,
    ChatContextMenuCommand,
    SUB_COMMAND,
)
from .loader import load_command_module
from .watcher import CommandFileWatcher, normalize_path

# 最后一次文件变化之后等待的秒数
FILE_UPDATE_TIMEOUT = 10.0

COMMAND_FILE_SUFFIX = ".py"


class CommandRegistry:
    """
    命令注册器

    注册表实例由启动流程显式创建，并传给分发器使用。
    """

    def __init__(
        self,
        watcher: Optional[CommandFileWatcher] = None,
        reload_delay: float = FILE_UPDATE_TIMEOUT
    ):
        """
        初始化命令注册器

        Args:
            watcher: 文件监视器，为 None 时不支持热重载
            reload_delay: 文件变化的防抖时长（秒）
        """
        self.logger = logging.getLogger("umeko.commands.registry")
        self.watcher = watcher
        self.reload_delay = reload_delay

        self.commands: Dict[str, CommandBase] = {}
        self.paths_to_commands: Dict[str, CommandBase] = {}
        self.slash_commands: Dict[str, SlashCommand] = {}
        self.user_context_menu_commands: Dict[str, UserContextMenuCommand] = {}
        self.chat_context_menu_commands: Dict[str, ChatContextMenuCommand] = {}

        self._pending_reloads: Dict[str, asyncio.TimerHandle] = {}
        self._reload_tasks: Dict[str, Set[asyncio.Task]] = {}
        self._plugins: Dict[str, BotPlugin] = {}
        self._lock = asyncio.Lock()

        if watcher is not None:
            watcher.bind(
                on_added=self.handle_file_added,
                on_changed=self.handle_file_changed,
                on_deleted=self.handle_file_deleted
            )

        self.logger.debug("命令注册器已初始化")

    def _table_for(self, command_type: CommandType) -> Dict[str, Any]:
        if command_type == CommandType.SLASH:
            return self.slash_commands
        if command_type == CommandType.USER_CONTEXT_MENU:
            return self.user_context_menu_commands
        if command_type == CommandType.CHAT_CONTEXT_MENU:
            return self.chat_context_menu_commands
        raise ValueError(f"未知的命令种类: {command_type}")

    # ------------------------------------------------------------------
    # 插件

    async def register_plugin(self, plugin: BotPlugin) -> None:
        """
        注册并加载插件，之后依赖该插件的命令才能加载

        Args:
            plugin: 插件实例
        """
        await plugin.load()
        self._plugins[plugin.name] = plugin

    def get_plugin(self, name: str) -> Optional[BotPlugin]:
        return self._plugins.get(name)

    def _check_dependencies(self, command: CommandBase) -> None:
        missing = [
            name for name in command.dependencies
            if name not in self._plugins or not self._plugins[name].is_loaded
        ]
        if missing:
            raise CommandDependencyError(
                f"命令 {command.name} 缺少依赖插件: {', '.join(missing)}",
                missing=missing
            )

    # ------------------------------------------------------------------
    # 注册

    async def add_command(self, command: CommandBase) -> None:
        """
        添加命令

        同一 (种类, 名称) 上已有命令时先等待其销毁完成，再插入并加载新命令。

        Args:
            command: 命令实例

        Raises:
            CommandDependencyError: 依赖插件未加载
            CommandLifecycleError: 旧命令销毁失败
            Exception: 新命令加载失败
        """
        async with self._lock:
            self._check_dependencies(command)
            table = self._table_for(command.type)

            existing = table.get(command.name)
            if existing is not None and existing is not command:
                try:
                    await existing.destroy()
                except Exception as e:
                    self.logger.error(f"销毁旧命令失败: {existing.name} - {e}", exc_info=True)
                    raise CommandLifecycleError(
                        f"替换命令 {command.name} 时销毁旧命令失败: {e}",
                        command=command.name
                    ) from e
                finally:
                    self._forget(existing)

            table[command.name] = command
            self.commands[command.unique_id] = command

            try:
                await command.load()
            except Exception:
                self._forget(command)
                raise

        self.logger.debug(f"命令已注册: {command.name} ({command.type.name})")

    async def remove_command(self, command: CommandBase) -> None:
        """
        销毁并移除命令

        Args:
            command: 命令实例
        """
        async with self._lock:
            try:
                await command.destroy()
            finally:
                self._forget(command)

        self.logger.info(f"命令已移除: {command.name}")

    def _forget(self, command: CommandBase) -> None:
        """从所有映射中移除命令，只移除仍指向该实例的条目"""
        table = self._table_for(command.type)
        if table.get(command.name) is command:
            del table[command.name]
        if self.commands.get(command.unique_id) is command:
            del self.commands[command.unique_id]
        for path in [p for p, c in self.paths_to_commands.items() if c is command]:
            del self.paths_to_commands[path]

    async def import_from_path(
        self,
        path: str,
        plugin: Optional[BotPlugin] = None,
        watch: bool = True
    ) -> Optional[CommandBase]:
        """
        从文件导入命令

        导入失败只记录日志，不影响注册表中的其他命令。

        Args:
            path: 命令文件路径
            plugin: 命令所属插件
            watch: 是否将文件加入监视集合

        Returns:
            导入的命令，失败时返回 None
        """
        if not path.endswith(COMMAND_FILE_SUFFIX):
            return None

        path = normalize_path(path)
        if watch and self.watcher is not None:
            self.watcher.add(path)

        try:
            command = await load_command_module(path)
            if plugin is not None:
                command.set_plugin(plugin)
            await self.add_command(command)
        except Exception as e:
            self.logger.error(f"导入命令失败: {path} - {type(e).__name__}: {e}", exc_info=True)
            return None

        # 文件改名了命令时，旧名称的命令不会被 add_command 替换
        previous = self.paths_to_commands.get(path)
        if previous is not None and previous is not command:
            try:
                await self.remove_command(previous)
            except Exception as e:
                self.logger.error(f"移除旧命令失败: {previous.name} - {e}", exc_info=True)

        self.paths_to_commands[path] = command
        return command

    async def load_directory(self, directory: str) -> int:
        """
        导入目录下的所有命令文件

        Args:
            directory: 命令目录

        Returns:
            成功导入的命令数量
        """
        self.logger.info(f"正在准备命令: {directory}")

        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            self.logger.error(f"无法读取命令目录 {directory}: {e}")
            return 0

        loaded = 0
        for entry in entries:
            path = os.path.join(directory, entry)
            if entry.startswith("_") or not entry.endswith(COMMAND_FILE_SUFFIX):
                continue
            if not os.path.isfile(path):
                continue
            if await self.import_from_path(path) is not None:
                loaded += 1

        self.logger.info(f"命令已就绪: {loaded} 个")
        return loaded

    # ------------------------------------------------------------------
    # 查找

    def get_slash_command(self, name: str) -> Optional[SlashCommand]:
        return self.slash_commands.get(name)

    def get_user_context_menu_command(self, name: str) -> Optional[UserContextMenuCommand]:
        return self.user_context_menu_commands.get(name)

    def get_chat_context_menu_command(self, name: str) -> Optional[ChatContextMenuCommand]:
        return self.chat_context_menu_commands.get(name)

    def get_command(self, command_type: CommandType, name: str) -> Optional[CommandBase]:
        return self._table_for(command_type).get(name)

    # ------------------------------------------------------------------
    # 导出

    def export_snapshot(self) -> List[Dict[str, Any]]:
        """
        导出平台命令注册接口所需的命令列表

        group 相同的斜杠命令合并为一个父命令，各命令作为其子命令。

        Returns:
            命令字典列表
        """
        commands_to_export: List[Dict[str, Any]] = []
        groups: Dict[str, Dict[str, Any]] = {}

        for command in self.slash_commands.values():
            if command.group:
                if command.group not in groups:
                    groups[command.group] = {
                        "name": command.group,
                        "description": f"{command.group} 命令组",
                        "options": []
                    }
                groups[command.group]["options"].append({**command.to_dict(), "type": SUB_COMMAND})
            else:
                commands_to_export.append(command.to_dict())

        commands_to_export.extend(groups.values())
        commands_to_export.extend(
            {"name": command.name, "type": int(command.type)}
            for command in self.user_context_menu_commands.values()
        )
        commands_to_export.extend(
            {"name": command.name, "type": int(command.type)}
            for command in self.chat_context_menu_commands.values()
        )

        return commands_to_export

    # ------------------------------------------------------------------
    # 热重载

    def _is_tracked(self, path: str) -> bool:
        if path in self.paths_to_commands:
            return True
        return self.watcher is not None and self.watcher.is_tracked(path)

    async def handle_file_added(self, path: str) -> None:
        path = normalize_path(path)
        if path in self.paths_to_commands:
            return
        self.logger.info(f"发现新的命令文件: {path}")

    async def handle_file_changed(self, path: str) -> None:
        """
        文件变化时安排一次防抖重载

        同一路径已有待处理的重载时重置计时，而不是再排一次。

        Args:
            path: 变化的文件路径
        """
        path = normalize_path(path)
        if not self._is_tracked(path):
            return

        loop = asyncio.get_running_loop()
        pending = self._pending_reloads.pop(path, None)
        if pending is not None:
            pending.cancel()
            self.logger.debug(f"刷新待处理的文件更新: {path}")
        else:
            self.logger.debug(f"添加待处理的文件更新: {path}")

        self._pending_reloads[path] = loop.call_later(self.reload_delay, self._start_reload, path)

    def _start_reload(self, path: str) -> None:
        self._pending_reloads.pop(path, None)
        task = asyncio.get_running_loop().create_task(self.reload_path(path))
        self._reload_tasks.setdefault(path, set()).add(task)
        task.add_done_callback(lambda finished: self._reload_finished(path, finished))

    def _reload_finished(self, path: str, task: asyncio.Task) -> None:
        tasks = self._reload_tasks.get(path)
        if tasks is None:
            return
        tasks.discard(task)
        if not tasks:
            del self._reload_tasks[path]

    def has_pending_reload(self, path: str) -> bool:
        return normalize_path(path) in self._pending_reloads

    def has_running_reload(self, path: str) -> bool:
        return normalize_path(path) in self._reload_tasks

    async def reload_path(self, path: str) -> Optional[CommandBase]:
        """
        重新导入文件对应的命令

        Args:
            path: 命令文件路径

        Returns:
            新的命令实例，跳过或失败时返回 None
        """
        path = normalize_path(path)
        command = self.paths_to_commands.get(path)
        plugin = None

        if command is not None:
            if command.state == LoadableState.DESTROYING:
                self.logger.warning(f"命令正在销毁，跳过本次重载: {command.name}")
                return None

            plugin = command.plugin
            try:
                async with self._lock:
                    try:
                        await command.destroy()
                    finally:
                        self._forget(command)
            except Exception as e:
                self.logger.error(f"重载前销毁命令失败: {command.name} - {e}", exc_info=True)
                return None

        self.logger.info(f"重新加载命令文件: {path}")
        return await self.import_from_path(path, plugin, watch=False)

    async def handle_file_deleted(self, path: str) -> None:
        """
        文件删除时卸载对应命令

        路径仍保留在监视集合中，文件重新出现时按内容变化重新加载。

        Args:
            path: 被删除的文件路径
        """
        path = normalize_path(path)
        pending = self._pending_reloads.pop(path, None)
        if pending is not None:
            pending.cancel()

        await self._cancel_reloads(path)

        # 被取消的重载可能已经插入了命令
        stale = [command for command in self.commands.values() if command.source_path == path]
        mapped = self.paths_to_commands.pop(path, None)
        if mapped is not None and mapped not in stale:
            stale.append(mapped)

        for command in stale:
            self.logger.info(f"命令文件已删除，卸载命令: {command.name}")
            try:
                await self.remove_command(command)
            except Exception as e:
                self.logger.error(f"卸载命令失败: {command.name} - {e}", exc_info=True)

    async def _cancel_reloads(self, path: Optional[str] = None) -> None:
        """取消正在执行的重载任务，path 为 None 时取消全部"""
        if path is None:
            tasks = [task for group in self._reload_tasks.values() for task in group]
        else:
            tasks = list(self._reload_tasks.get(path, ()))

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """取消所有待处理的重载并销毁全部命令"""
        for handle in self._pending_reloads.values():
            handle.cancel()
        self._pending_reloads.clear()

        await self._cancel_reloads()

        for command in list(self.commands.values()):
            try:
                await self.remove_command(command)
            except Exception as e:
                self.logger.error(f"关闭时销毁命令失败: {command.name} - {e}", exc_info=True)

        self.logger.info("命令注册器已关闭")

    def get_stats(self) -> Dict[str, int]:
        return {
            "slash_commands": len(self.slash_commands),
            "user_context_menu_commands": len(self.user_context_menu_commands),
            "chat_context_menu_commands": len(self.chat_context_menu_commands),
            "watched_files": len(self.paths_to_commands),
            "pending_reloads": len(self._pending_reloads),
            "running_reloads": len(self._reload_tasks),
        }
