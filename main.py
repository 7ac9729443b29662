#!/usr/bin/env python3
"""
Umeko 机器人主程序入口点，负责配置加载、日志设置、机器人初始化和启动。
"""
import logging

from umeko.bot import UmekoBot
from umeko.utils.config_manager import ConfigManager
from umeko.utils.logger import setup_logger


def main() -> int:
    """
    Umeko 机器人主入口函数。

    Returns:
        int: 退出代码（0表示成功，1表示错误）
    """
    try:
        config = ConfigManager()
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger("umeko").error(f"❌ 配置文件错误: {e}")
        logging.getLogger("umeko").error("请将 config/config.yaml.example 复制为 config/config.yaml 并填写配置")
        return 1

    setup_logger(
        log_level=config.get_log_level(),
        log_file=config.get_log_file(),
        max_size=config.get_log_max_size(),
        backup_count=config.get_log_backup_count()
    )
    logger = logging.getLogger("umeko")

    logger.info("=" * 60)
    logger.info("🤖 Umeko 机器人启动中...")
    logger.info("=" * 60)

    try:
        discord_token = config.get_discord_token()
    except ValueError as e:
        logger.error(f"❌ Discord 令牌配置错误: {e}")
        logger.error("请设置 DISCORD_BOT_TOKEN 环境变量或 config/config.yaml 中的 discord.token")
        return 1

    try:
        bot = UmekoBot(config)
        _log_bot_configuration(logger, config)
        bot.run(discord_token)
    except Exception as e:
        logger.error(f"❌ 启动机器人时发生意外错误: {e}", exc_info=True)
        return 1

    return 0


def _log_bot_configuration(logger: logging.Logger, config: ConfigManager) -> None:
    """记录机器人配置摘要"""
    logger.info("📋 机器人配置摘要:")
    logger.info(f"   命令目录: {config.get_commands_directory()}")
    logger.info(f"   热重载: {'✅ 已启用' if config.is_hot_reload_enabled() else '❌ 已禁用'}")
    logger.info(f"   重载防抖: {config.get_reload_delay()} 秒")
    logger.info(f"   就绪后上传命令: {'✅' if config.should_upload_on_ready() else '❌'}")
    logger.info(f"   上传目标: {config.get_guild_id() or '全局'}")
    logger.info("=" * 60)


if __name__ == "__main__":
    exit(main())
