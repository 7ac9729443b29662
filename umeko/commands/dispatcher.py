"""
命令分发器

接收平台交互和消息事件，从注册表中找到对应命令并执行。
"""

import logging
import re
import time
from typing import Any, Optional
import discord

from umeko.core.error_handler import CommandErrorHandler
from umeko.core.logging_config import CommandLogger
from .base_command import CommandBase, CommandType
from .context import CommandContext, MessageCommandContext
from .registry import CommandRegistry

HELP_COMMAND = "help"


class CommandDispatcher:
    """
    命令分发器

    未注册的命令静默忽略；命令执行中的任何异常都在这里被捕获，
    不会传播到 discord.py 的事件循环。
    """

    def __init__(
        self,
        client: discord.Client,
        registry: CommandRegistry,
        error_handler: Optional[CommandErrorHandler] = None,
        slow_command_threshold: float = 5.0
    ):
        """
        初始化命令分发器

        Args:
            client: Discord客户端
            registry: 命令注册表
            error_handler: 执行错误处理器
            slow_command_threshold: 性能警告阈值（秒）
        """
        self.client = client
        self.registry = registry
        self.error_handler = error_handler or CommandErrorHandler()
        self.slow_command_threshold = slow_command_threshold
        self.logger = logging.getLogger("umeko.commands.dispatcher")
        self.command_logger = CommandLogger("execution")

    def resolve(self, ctx: Any) -> Optional[CommandBase]:
        """
        根据上下文查找命令

        斜杠命令优先按子命令名称查找，以支持 group 归并的命令。

        Args:
            ctx: 命令上下文

        Returns:
            命令实例，未注册时返回 None
        """
        if ctx.type == CommandType.SLASH:
            command = None
            if ctx.subcommand_name:
                command = self.registry.get_slash_command(ctx.subcommand_name)
            if command is None and ctx.command_name:
                command = self.registry.get_slash_command(ctx.command_name)
            return command

        if ctx.type == CommandType.USER_CONTEXT_MENU:
            return self.registry.get_user_context_menu_command(ctx.command_name)

        return self.registry.get_chat_context_menu_command(ctx.command_name)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        """
        处理交互事件

        Args:
            interaction: Discord交互对象
        """
        try:
            if interaction.type != discord.InteractionType.application_command:
                return

            ctx = CommandContext(interaction, registry=self.registry)
            self.logger.debug(f"新的交互: {ctx.command_name} ({ctx.type.name})")

            command = self.resolve(ctx)
            if command is None:
                self.logger.debug(f"未注册的命令: {ctx.command_name}")
                return

            await self.execute(command, ctx)

        except Exception as e:
            self.logger.error(f"处理交互失败: {e}", exc_info=True)

    async def on_message(self, message: discord.Message) -> None:
        """
        处理 @机器人 触发的消息命令

        只提到机器人时执行 help，否则机器人提及之后的第一个词作为斜杠命令名称。

        Args:
            message: Discord消息
        """
        try:
            bot_user = self.client.user
            if bot_user is None:
                return
            if message.author.id == bot_user.id or message.author.bot:
                return
            if not any(user.id == bot_user.id for user in message.mentions):
                return

            content = message.content or ""
            mention = re.search(rf"<@!?{bot_user.id}>", content)
            if mention is None:
                return

            args = content[mention.end():].split()
            name = args[0].lower() if args else HELP_COMMAND

            command = self.registry.get_slash_command(name)
            if command is None:
                self.logger.debug(f"消息命令未注册: {name}")
                return

            ctx = MessageCommandContext(message, args=args, client=self.client, registry=self.registry)
            await self.execute(command, ctx, *args[1:])

        except Exception as e:
            self.logger.error(f"处理消息命令失败: {e}", exc_info=True)

    async def execute(self, command: CommandBase, ctx: Any, *args) -> bool:
        """
        执行命令并处理异常

        Args:
            command: 命令实例
            ctx: 命令上下文
            *args: 额外参数

        Returns:
            True 如果命令成功执行
        """
        start_time = time.time()
        self.command_logger.log_command_start(ctx, command.name)

        try:
            await command.execute(ctx, *args)
        except Exception as e:
            execution_time = time.time() - start_time
            self.command_logger.log_command_error(ctx, command.name, e, execution_time)
            await self.error_handler.handle_execution_error(ctx, e, command.name)
            return False

        execution_time = time.time() - start_time
        self.command_logger.log_command_success(ctx, command.name, execution_time)
        self.command_logger.log_performance_warning(
            command.name,
            execution_time,
            threshold=self.slow_command_threshold
        )
        return True
