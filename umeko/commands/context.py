"""
命令上下文

将平台交互对象包装为统一的接口，命令实现无需区分交互种类。
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
import discord

from .base_command import CommandType, SUB_COMMAND, SUB_COMMAND_GROUP


def find_subcommand_name(options: Optional[Sequence[Dict[str, Any]]]) -> Optional[str]:
    """
    从原始参数数据中找出子命令名称

    Args:
        options: 交互数据中的 options 列表

    Returns:
        子命令名称，没有子命令时返回 None
    """
    for option in options or []:
        option_type = option.get("type")
        if option_type == SUB_COMMAND:
            return option.get("name")
        if option_type == SUB_COMMAND_GROUP:
            return find_subcommand_name(option.get("options"))
    return None


def _leaf_options(options: Optional[Sequence[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    for option in options or []:
        if option.get("type") in (SUB_COMMAND, SUB_COMMAND_GROUP):
            return _leaf_options(option.get("options"))
    return list(options or [])


class CommandContext:
    """
    交互命令上下文

    包装一个 discord.Interaction，提供 defer_reply / reply / edit_reply。
    """

    def __init__(self, interaction: discord.Interaction, registry: Any = None):
        """
        Args:
            interaction: Discord交互对象
            registry: 命令注册表，供需要列出命令的实现使用
        """
        self.interaction = interaction
        self.registry = registry
        self._deferred = False
        self.logger = logging.getLogger("umeko.commands.context")

    @property
    def data(self) -> Dict[str, Any]:
        return self.interaction.data or {}

    @property
    def type(self) -> CommandType:
        """交互的命令种类，未知编码按消息右键菜单处理"""
        raw_type = self.data.get("type", CommandType.SLASH.value)
        if raw_type == CommandType.SLASH.value:
            return CommandType.SLASH
        if raw_type == CommandType.USER_CONTEXT_MENU.value:
            return CommandType.USER_CONTEXT_MENU
        return CommandType.CHAT_CONTEXT_MENU

    @property
    def command_name(self) -> Optional[str]:
        return self.data.get("name")

    @property
    def subcommand_name(self) -> Optional[str]:
        if self.type != CommandType.SLASH:
            return None
        return find_subcommand_name(self.data.get("options"))

    @property
    def target_id(self) -> Optional[int]:
        """右键菜单命令的目标ID"""
        target = self.data.get("target_id")
        return int(target) if target is not None else None

    @property
    def deferred(self) -> bool:
        return self._deferred

    @property
    def user(self):
        return self.interaction.user

    @property
    def guild(self):
        return self.interaction.guild

    @property
    def channel(self):
        return self.interaction.channel

    @property
    def client(self):
        return self.interaction.client

    def get_option(self, name: str, default: Any = None) -> Any:
        """
        读取参数值

        Args:
            name: 参数名称
            default: 参数不存在时的默认值

        Returns:
            参数值
        """
        for option in _leaf_options(self.data.get("options")):
            if option.get("name") == name:
                return option.get("value", default)
        return default

    async def defer_reply(self, **kwargs) -> None:
        await self.interaction.response.defer(**kwargs)
        self._deferred = True

    async def reply(self, content: Optional[str] = None, **kwargs) -> None:
        await self.interaction.response.send_message(content, **kwargs)

    async def edit_reply(self, content: Optional[str] = None, **kwargs) -> Any:
        """
        编辑回复

        尚未延迟回复且存在频道时，没有可编辑的消息，改为在频道中发送新消息。
        """
        if not self.deferred and self.channel is not None:
            kwargs.pop("ephemeral", None)
            return await self.channel.send(content, **kwargs)

        return await self.interaction.edit_original_response(content=content, **kwargs)

    async def send(self, content: Optional[str] = None, **kwargs) -> Any:
        """发送消息，交互已响应时使用 followup"""
        if self.interaction.response.is_done():
            return await self.interaction.followup.send(content, **kwargs)
        return await self.reply(content, **kwargs)


class MessageCommandContext:
    """
    消息命令上下文

    通过 @机器人 触发的命令使用与交互命令相同的接口。
    """

    type = CommandType.SLASH

    def __init__(
        self,
        message: discord.Message,
        args: Optional[Sequence[str]] = None,
        client: Optional[discord.Client] = None,
        registry: Any = None
    ):
        self.message = message
        self.args: List[str] = list(args or [])
        self._client = client
        self.registry = registry
        self._deferred = False
        self._reply_message: Optional[discord.Message] = None

    @property
    def command_name(self) -> Optional[str]:
        return self.args[0] if self.args else None

    @property
    def subcommand_name(self) -> Optional[str]:
        return None

    @property
    def target_id(self) -> Optional[int]:
        return None

    @property
    def deferred(self) -> bool:
        return self._deferred

    @property
    def user(self):
        return self.message.author

    @property
    def guild(self):
        return self.message.guild

    @property
    def channel(self):
        return self.message.channel

    @property
    def client(self):
        return self._client

    def get_option(self, name: str, default: Any = None) -> Any:
        return default

    async def defer_reply(self, **kwargs) -> None:
        await self.channel.typing()
        self._deferred = True

    async def reply(self, content: Optional[str] = None, **kwargs) -> discord.Message:
        kwargs.pop("ephemeral", None)
        self._reply_message = await self.message.reply(content, **kwargs)
        return self._reply_message

    async def edit_reply(self, content: Optional[str] = None, **kwargs) -> Any:
        kwargs.pop("ephemeral", None)
        if self._reply_message is not None:
            return await self._reply_message.edit(content=content, **kwargs)
        self._reply_message = await self.channel.send(content, **kwargs)
        return self._reply_message

    async def send(self, content: Optional[str] = None, **kwargs) -> discord.Message:
        return await self.reply(content, **kwargs)
