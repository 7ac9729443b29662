"""
命令日志记录

提供命令执行的结构化日志：
- 开始/成功/失败记录
- 执行耗时与性能警告
"""

import logging
import time
from typing import Any


class CommandLogger:
    """
    命令系统专用日志记录器

    所有记录都带有 extra={'context': ...}，便于结构化日志处理器读取。
    """

    def __init__(self, name: str):
        """
        初始化日志记录器

        Args:
            name: 日志记录器名称
        """
        self.logger = logging.getLogger(f"umeko.commands.{name}")

    @staticmethod
    def _describe(ctx: Any) -> dict:
        user = getattr(ctx, "user", None)
        guild = getattr(ctx, "guild", None)
        channel = getattr(ctx, "channel", None)
        return {
            'user_id': getattr(user, "id", None),
            'user_name': getattr(user, "display_name", None),
            'guild_id': getattr(guild, "id", None),
            'guild_name': getattr(guild, "name", None),
            'channel_id': getattr(channel, "id", None),
        }

    def log_command_start(self, ctx: Any, command_name: str, **kwargs) -> None:
        """
        记录命令开始执行

        Args:
            ctx: 命令上下文
            command_name: 命令名称
            **kwargs: 额外的上下文信息
        """
        context = {
            **self._describe(ctx),
            'command': command_name,
            'timestamp': time.time(),
            **kwargs
        }

        self.logger.info(
            f"命令开始 - {command_name} | "
            f"用户: {context['user_name']} | "
            f"服务器: {context['guild_name'] or 'DM'}",
            extra={'context': context}
        )

    def log_command_success(
        self,
        ctx: Any,
        command_name: str,
        execution_time: float = None,
        **kwargs
    ) -> None:
        """
        记录命令成功执行

        Args:
            ctx: 命令上下文
            command_name: 命令名称
            execution_time: 执行时间（秒）
        """
        context = {
            **self._describe(ctx),
            'command': command_name,
            'execution_time': execution_time,
            'status': 'success',
            **kwargs
        }

        time_info = f" | 耗时: {execution_time:.2f}s" if execution_time else ""

        self.logger.info(
            f"命令成功 - {command_name} | 用户: {context['user_name']}{time_info}",
            extra={'context': context}
        )

    def log_command_error(
        self,
        ctx: Any,
        command_name: str,
        error: Exception,
        execution_time: float = None,
        **kwargs
    ) -> None:
        """
        记录命令执行错误

        Args:
            ctx: 命令上下文
            command_name: 命令名称
            error: 异常对象
            execution_time: 执行时间（秒）
        """
        context = {
            **self._describe(ctx),
            'command': command_name,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'execution_time': execution_time,
            'status': 'error',
            **kwargs
        }

        time_info = f" | 耗时: {execution_time:.2f}s" if execution_time else ""

        self.logger.error(
            f"命令错误 - {command_name} | "
            f"用户: {context['user_name']} | "
            f"错误: {type(error).__name__}: {error}{time_info}",
            extra={'context': context},
            exc_info=error
        )

    def log_performance_warning(
        self,
        operation: str,
        execution_time: float,
        threshold: float = 5.0,
        **kwargs
    ) -> None:
        """
        记录性能警告

        Args:
            operation: 操作名称
            execution_time: 执行时间（秒）
            threshold: 警告阈值（秒）
        """
        if execution_time > threshold:
            context = {
                'operation': operation,
                'execution_time': execution_time,
                'threshold': threshold,
                'performance_issue': True,
                **kwargs
            }

            self.logger.warning(
                f"性能警告 - {operation} | "
                f"耗时: {execution_time:.2f}s (阈值: {threshold}s)",
                extra={'context': context}
            )

    def debug(self, message: str, **kwargs) -> None:
        """记录调试信息"""
        self.logger.debug(message, extra={'context': kwargs})

    def info(self, message: str, **kwargs) -> None:
        """记录信息"""
        self.logger.info(message, extra={'context': kwargs})

    def warning(self, message: str, **kwargs) -> None:
        """记录警告"""
        self.logger.warning(message, extra={'context': kwargs})

    def error(self, message: str, error: Exception = None, **kwargs) -> None:
        """记录错误"""
        self.logger.error(message, extra={'context': kwargs}, exc_info=error)
