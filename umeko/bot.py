"""Umeko 机器人主实现"""
import asyncio
import logging
from typing import Optional
import discord

from umeko.commands import (
    CommandDispatcher,
    CommandFileWatcher,
    CommandRegistry,
    CommandUploader,
)
from umeko.core.error_handler import CommandErrorHandler
from umeko.utils.config_manager import ConfigManager


class UmekoBot:
    """
    Umeko 机器人主实现类。

    显式创建命令系统的各个组件并连接到 Discord 客户端：
    - 启动时从命令目录导入所有命令
    - 命令文件变化时热重载
    - 就绪后上传命令到 Discord
    """

    def __init__(self, config: ConfigManager):
        """
        初始化机器人

        Args:
            config: 配置管理器
        """
        self.logger = logging.getLogger("umeko.bot")
        self.config = config

        intents = discord.Intents.default()
        intents.message_content = True
        self.client = discord.Client(intents=intents)

        self.watcher = CommandFileWatcher()
        self.registry = CommandRegistry(
            watcher=self.watcher,
            reload_delay=config.get_reload_delay()
        )
        self.error_handler = CommandErrorHandler(reply_on_error=config.should_reply_on_error())
        self.dispatcher = CommandDispatcher(self.client, self.registry, self.error_handler)
        self.uploader = self._create_uploader()

        self._commands_loaded = False
        self._setup_event_handlers()

        self.logger.info("🤖 机器人初始化成功")

    def _create_uploader(self) -> Optional[CommandUploader]:
        application_id = self.config.get_application_id()
        if not application_id:
            self.logger.warning("未配置 discord.application_id，命令上传已禁用")
            return None

        try:
            token = self.config.get_discord_token()
        except ValueError:
            self.logger.warning("未配置 Discord 令牌，命令上传已禁用")
            return None

        return CommandUploader(
            application_id=application_id,
            token=token,
            api_base=self.config.get_api_base_url()
        )

    def _setup_event_handlers(self) -> None:
        """设置 Discord 事件处理器。"""
        @self.client.event
        async def on_ready():
            await self._on_ready()

        @self.client.event
        async def on_interaction(interaction: discord.Interaction):
            await self.dispatcher.on_interaction(interaction)

        @self.client.event
        async def on_message(message: discord.Message):
            await self.dispatcher.on_message(message)

        self.logger.debug("事件处理器设置完成")

    async def _on_ready(self) -> None:
        """机器人就绪时的初始化任务"""
        try:
            self.logger.info(f"🤖 机器人已就绪: {self.client.user}")

            # 断线重连也会触发 on_ready，命令只导入一次
            if self._commands_loaded:
                return
            self._commands_loaded = True

            await self.load_commands()

            if self.config.is_hot_reload_enabled():
                self.watcher.start()

            if self.config.should_upload_on_ready():
                await self.upload_commands()

        except Exception as e:
            self.logger.error(f"机器人就绪初始化失败: {e}", exc_info=True)

    async def load_commands(self) -> int:
        """
        从命令目录导入所有命令

        Returns:
            成功导入的命令数量
        """
        directory = self.config.get_commands_directory()
        count = await self.registry.load_directory(directory)
        self.logger.info(f"✅ 已导入 {count} 个命令")
        return count

    async def upload_commands(self) -> bool:
        """
        上传命令到 Discord

        Returns:
            True 如果上传成功
        """
        if self.uploader is None:
            return False
        return await self.uploader.upload_commands(self.registry, self.config.get_guild_id())

    async def start(self, token: str) -> None:
        """
        Start the Discord bot.

        Args:
            token: Discord bot token
        """
        try:
            self.logger.info("🚀 启动机器人...")
            await self.client.start(token)
        finally:
            await self.close()

    async def close(self) -> None:
        """关闭机器人并清理资源。"""
        try:
            self.logger.info("🛑 正在关闭机器人...")
            await self.watcher.stop()
            await self.registry.shutdown()
            await self.client.close()
            self.logger.info("✅ 机器人关闭成功")
        except Exception as e:
            self.logger.error(f"关闭过程中发生错误: {e}", exc_info=True)

    def run(self, token: str) -> None:
        """
        运行机器人（阻塞式）。

        Args:
            token: Discord 机器人令牌
        """
        try:
            asyncio.run(self.start(token))
        except KeyboardInterrupt:
            self.logger.info("用户停止了机器人")

    def get_stats(self) -> dict:
        """
        获取机器人统计信息。

        Returns:
            包含机器人统计信息的字典
        """
        return {
            "bot_ready": self.client.is_ready(),
            "guild_count": len(self.client.guilds),
            "hot_reload_running": self.watcher.is_running,
            "errors": self.error_handler.get_error_stats(),
            **self.registry.get_stats()
        }
