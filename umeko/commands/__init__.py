"""
命令分发层

提供命令系统的全部组件：
- 命令描述符与上下文
- 支持热重载的命令注册表
- 交互/消息分发器
- 命令上传器
"""

from .base_command import (
    CommandType,
    CommandOption,
    CommandBase,
    SlashCommand,
    UserContextMenuCommand,
    ChatContextMenuCommand,
)
from .context import CommandContext, MessageCommandContext
from .watcher import CommandFileWatcher
from .registry import CommandRegistry, FILE_UPDATE_TIMEOUT
from .dispatcher import CommandDispatcher
from .uploader import CommandUploader

__all__ = [
    'CommandType',
    'CommandOption',
    'CommandBase',
    'SlashCommand',
    'UserContextMenuCommand',
    'ChatContextMenuCommand',
    'CommandContext',
    'MessageCommandContext',
    'CommandFileWatcher',
    'CommandRegistry',
    'FILE_UPDATE_TIMEOUT',
    'CommandDispatcher',
    'CommandUploader',
]
