"""命令模块加载器"""

import hashlib
import importlib.machinery
import importlib.util
import sys
from pathlib import Path

from umeko.core.error_handler import CommandImportError
from .base_command import CommandBase

COMMAND_ATTRIBUTE = "Command"
MODULE_PREFIX = "umeko_commands"


class CommandSourceLoader(importlib.machinery.SourceFileLoader):
    """
    总是从源文件编译的加载器

    同一秒内多次保存时 .pyc 的时间戳无法区分新旧版本，
    因此既不读取也不写入字节码缓存。
    """

    def get_code(self, fullname):
        source = self.get_data(self.path)
        return self.source_to_code(source, self.path)


def module_name_for(path: str) -> str:
    """根据文件路径生成稳定的模块名，同名文件在不同目录下不会冲突"""
    digest = hashlib.md5(path.encode("utf-8")).hexdigest()[:8]
    return f"{MODULE_PREFIX}.{Path(path).stem}_{digest}"


async def load_command_module(path: str) -> CommandBase:
    """
    从文件加载命令

    每次调用都创建新的模块对象并重新执行源文件，
    保证热重载拿到的是文件当前的内容。

    Args:
        path: 命令文件的绝对路径

    Returns:
        构造好的命令实例

    Raises:
        CommandImportError: 模块没有导出 Command 或导出的不是命令
        Exception: 模块执行或构造过程中抛出的异常
    """
    name = module_name_for(path)
    spec = importlib.util.spec_from_file_location(
        name,
        path,
        loader=CommandSourceLoader(name, path)
    )
    module = importlib.util.module_from_spec(spec)

    # 替换旧版本的模块缓存
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise

    command_class = getattr(module, COMMAND_ATTRIBUTE, None)
    if command_class is None:
        raise CommandImportError(f"命令文件没有导出 {COMMAND_ATTRIBUTE}: {path}", path=path)

    command = command_class()
    if not isinstance(command, CommandBase):
        raise CommandImportError(
            f"{COMMAND_ATTRIBUTE} 不是命令类型: {type(command).__name__} ({path})",
            path=path
        )

    command.source_path = path
    return command
