"""
命令错误处理系统

提供统一的错误分类和用户反馈：
- 命令导入、依赖、生命周期错误的异常类型
- 命令执行错误的分类处理
- 错误统计
"""

import asyncio
from enum import Enum
from typing import Optional, Dict, Any
import discord

from .logging_config import CommandLogger


class ErrorCategory(Enum):
    """错误分类枚举"""
    IMPORT = "import"                  # 命令模块导入错误
    DEPENDENCY = "dependency"          # 插件依赖缺失
    LIFECYCLE = "lifecycle"            # 加载/销毁错误
    USER_ERROR = "user_error"          # 用户输入错误
    PERMISSION_ERROR = "permission"    # 权限错误
    NETWORK_ERROR = "network"          # 网络错误
    SYSTEM_ERROR = "system"            # 系统错误


class CommandError(Exception):
    """命令系统自定义异常基类"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM_ERROR,
        user_message: Optional[str] = None,
        recoverable: bool = False,
        **context
    ):
        """
        初始化自定义异常

        Args:
            message: 错误消息
            category: 错误分类
            user_message: 用户友好的错误消息
            recoverable: 是否可恢复
            **context: 额外的上下文信息
        """
        super().__init__(message)
        self.category = category
        self.user_message = user_message or message
        self.recoverable = recoverable
        self.context = context


class CommandImportError(CommandError):
    """命令模块无法导入或构造"""

    def __init__(self, message: str, path: str, **context):
        super().__init__(message, ErrorCategory.IMPORT, path=path, **context)
        self.path = path


class CommandDependencyError(CommandError):
    """命令依赖的插件未加载"""

    def __init__(self, message: str, missing: list, **context):
        super().__init__(message, ErrorCategory.DEPENDENCY, recoverable=True, missing=missing, **context)
        self.missing = missing


class CommandLifecycleError(CommandError):
    """替换命令时销毁旧命令失败"""

    def __init__(self, message: str, **context):
        super().__init__(message, ErrorCategory.LIFECYCLE, **context)


class CommandErrorHandler:
    """
    命令执行错误处理器

    记录错误、统计错误类型，并在允许时给用户发送错误提示。
    """

    _TITLES: Dict[ErrorCategory, str] = {
        ErrorCategory.USER_ERROR: "输入错误",
        ErrorCategory.PERMISSION_ERROR: "权限不足",
        ErrorCategory.NETWORK_ERROR: "网络错误",
        ErrorCategory.SYSTEM_ERROR: "系统错误",
    }

    _DESCRIPTIONS: Dict[ErrorCategory, str] = {
        ErrorCategory.USER_ERROR: "请检查您的输入并重试。",
        ErrorCategory.PERMISSION_ERROR: "您没有执行此命令的权限，或机器人缺少必要的权限。",
        ErrorCategory.NETWORK_ERROR: "网络连接出现问题，请稍后重试。",
        ErrorCategory.SYSTEM_ERROR: "命令执行时发生错误，请稍后重试。",
    }

    def __init__(self, reply_on_error: bool = True):
        """
        初始化错误处理器

        Args:
            reply_on_error: 是否向用户发送错误提示
        """
        self.logger = CommandLogger("error_handler")
        self.reply_on_error = reply_on_error
        self._error_stats: Dict[str, int] = {}

    async def handle_execution_error(
        self,
        ctx: Any,
        error: Exception,
        command_name: Optional[str] = None
    ) -> bool:
        """
        处理命令执行错误

        Args:
            ctx: 命令上下文
            error: 异常对象
            command_name: 命令名称

        Returns:
            True 如果已向用户发送错误提示
        """
        error_type = type(error).__name__
        self._error_stats[error_type] = self._error_stats.get(error_type, 0) + 1

        category = self.categorize_error(error)
        self.logger.warning(
            f"命令 {command_name or 'unknown'} 执行失败 ({category.value}): {error_type}: {error}",
            command=command_name,
            error_category=category.value
        )

        if not self.reply_on_error:
            return False

        embed = self.build_error_embed(error, category)
        try:
            await ctx.send(embed=embed, ephemeral=True)
            return True
        except Exception as e:
            self.logger.error(f"发送错误响应失败: {e}")
            return False

    def categorize_error(self, error: Exception) -> ErrorCategory:
        """
        分类错误

        Args:
            error: 异常对象

        Returns:
            错误分类
        """
        if isinstance(error, CommandError):
            return error.category

        if isinstance(error, discord.Forbidden):
            return ErrorCategory.PERMISSION_ERROR
        if isinstance(error, discord.HTTPException):
            return ErrorCategory.NETWORK_ERROR
        if isinstance(error, asyncio.TimeoutError):
            return ErrorCategory.NETWORK_ERROR

        return ErrorCategory.SYSTEM_ERROR

    def build_error_embed(self, error: Exception, category: ErrorCategory) -> discord.Embed:
        """构建错误提示嵌入消息"""
        title = self._TITLES.get(category, "系统错误")
        description = self._DESCRIPTIONS.get(category, self._DESCRIPTIONS[ErrorCategory.SYSTEM_ERROR])

        if isinstance(error, CommandError) and error.user_message:
            description = error.user_message

        return discord.Embed(
            title=f"❌ {title}",
            description=description,
            color=discord.Color.red()
        )

    def get_error_stats(self) -> Dict[str, int]:
        """
        获取错误统计

        Returns:
            错误统计字典
        """
        return self._error_stats.copy()

    def reset_error_stats(self) -> None:
        """重置错误统计"""
        self._error_stats.clear()
        self.logger.info("错误统计已重置")
