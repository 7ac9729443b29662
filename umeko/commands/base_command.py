"""
命令描述符

定义三类可调用命令的元数据与行为：
- SlashCommand: 斜杠命令，可通过 group 归并为子命令
- UserContextMenuCommand: 用户右键菜单命令
- ChatContextMenuCommand: 消息右键菜单命令
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Union
import discord

from umeko.core.lifecycle import Loadable, BotPlugin


class CommandType(IntEnum):
    """命令种类，取值即平台协议中的类型编码"""
    SLASH = discord.AppCommandType.chat_input.value
    USER_CONTEXT_MENU = discord.AppCommandType.user.value
    CHAT_CONTEXT_MENU = discord.AppCommandType.message.value


SUB_COMMAND = discord.AppCommandOptionType.subcommand.value
SUB_COMMAND_GROUP = discord.AppCommandOptionType.subcommand_group.value


@dataclass
class CommandOption:
    """命令参数声明"""
    name: str
    description: str
    type: discord.AppCommandOptionType = discord.AppCommandOptionType.string
    required: bool = False
    choices: List[Dict[str, Any]] = field(default_factory=list)
    options: List["CommandOption"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为平台注册接口的参数格式

        Returns:
            参数字典
        """
        data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
        }
        if self.required:
            data["required"] = True
        if self.choices:
            data["choices"] = list(self.choices)
        if self.options:
            data["options"] = [option.to_dict() for option in self.options]
        return data


OptionSpec = Union[CommandOption, Dict[str, Any]]


def serialize_options(options: Sequence[OptionSpec]) -> List[Dict[str, Any]]:
    """将参数声明序列化，字典形式的声明原样输出"""
    return [
        option.to_dict() if isinstance(option, CommandOption) else dict(option)
        for option in options
    ]


class CommandBase(Loadable, ABC):
    """
    所有命令的基础类

    命令文件需要导出一个名为 Command 的子类，且可以无参构造。
    """

    command_type: CommandType

    def __init__(
        self,
        name: str,
        description: str = "",
        dependencies: Optional[Sequence[str]] = None
    ):
        """
        初始化命令

        Args:
            name: 命令名称，在同一种类中唯一
            description: 命令描述
            dependencies: 加载前必须就绪的插件名称
        """
        super().__init__()
        self.name = name
        self.description = description
        self.dependencies: List[str] = list(dependencies or [])
        self.plugin: Optional[BotPlugin] = None
        self.source_path: Optional[str] = None
        self.logger = logging.getLogger(f"umeko.commands.{name}")

    @property
    def type(self) -> CommandType:
        return self.command_type

    @property
    def unique_id(self) -> str:
        """种类 + 名称，在整个注册表中唯一"""
        return f"{int(self.type)}{self.name}"

    def set_plugin(self, plugin: BotPlugin) -> None:
        self.plugin = plugin

    async def load(self) -> None:
        self.logger.debug(f"加载命令: {self.name}")
        await super().load()
        self.logger.debug(f"命令已加载: {self.name}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": int(self.type),
            "description": self.description,
        }

    @abstractmethod
    async def execute(self, ctx: Any, *args) -> None:
        """
        执行命令

        Args:
            ctx: 命令上下文（CommandContext 或 MessageCommandContext）
            *args: 消息触发时的额外参数
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, state={self.state.value})"


class CommandWithOptions(CommandBase):
    """带参数声明的命令"""

    def __init__(
        self,
        name: str,
        description: str = "",
        options: Optional[Sequence[OptionSpec]] = None,
        dependencies: Optional[Sequence[str]] = None
    ):
        super().__init__(name, description, dependencies)
        self.options: List[OptionSpec] = list(options or [])


class SlashCommand(CommandWithOptions):
    """
    斜杠命令

    group 非空的命令在导出时会被归并为同名父命令下的子命令。
    """

    command_type = CommandType.SLASH

    def __init__(
        self,
        name: str,
        description: str = "",
        group: str = "",
        options: Optional[Sequence[OptionSpec]] = None,
        dependencies: Optional[Sequence[str]] = None
    ):
        super().__init__(name, description, options, dependencies)
        self.group = group

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "options": serialize_options(self.options)}


class UserContextMenuCommand(CommandWithOptions):
    """用户右键菜单命令"""

    command_type = CommandType.USER_CONTEXT_MENU


class ChatContextMenuCommand(CommandBase):
    """消息右键菜单命令"""

    command_type = CommandType.CHAT_CONTEXT_MENU
