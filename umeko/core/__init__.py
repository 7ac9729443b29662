"""
核心基础设施

提供命令系统共用的组件：
- 生命周期状态机
- 错误分类与处理
- 结构化日志
"""

from .lifecycle import LoadableState, Loadable, BotPlugin
from .logging_config import CommandLogger
from .error_handler import (
    CommandErrorHandler,
    CommandError,
    CommandImportError,
    CommandDependencyError,
    CommandLifecycleError,
    ErrorCategory
)

__all__ = [
    'LoadableState',
    'Loadable',
    'BotPlugin',
    'CommandLogger',
    'CommandErrorHandler',
    'CommandError',
    'CommandImportError',
    'CommandDependencyError',
    'CommandLifecycleError',
    'ErrorCategory'
]
