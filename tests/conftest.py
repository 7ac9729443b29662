"""
命令系统测试配置

提供测试所需的fixtures和配置
"""

import asyncio
import logging
import os
import sys
from unittest.mock import Mock, AsyncMock

import pytest
import discord

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from umeko.commands import (
    SlashCommand,
    UserContextMenuCommand,
    ChatContextMenuCommand,
)


class RecordingMixin:
    """记录加载/销毁顺序与执行情况的测试命令"""

    def _init_recording(self, events):
        self.events = events if events is not None else []
        self.executions = []
        self.fail_on_load = False
        self.fail_on_destroy = False
        self.fail_on_execute = None

    async def on_load(self):
        await asyncio.sleep(0)
        if self.fail_on_load:
            raise RuntimeError(f"{self.name} 加载失败")
        self.events.append(("load", self.name, id(self)))

    async def on_destroy(self):
        await asyncio.sleep(0)
        self.events.append(("destroy", self.name, id(self)))
        if self.fail_on_destroy:
            raise RuntimeError(f"{self.name} 销毁失败")

    async def execute(self, ctx, *args):
        self.executions.append((ctx, args))
        if self.fail_on_execute is not None:
            raise self.fail_on_execute


class RecordingSlashCommand(RecordingMixin, SlashCommand):
    def __init__(self, name, events=None, group="", description=None, options=None, dependencies=None):
        super().__init__(name, description or f"{name} 命令", group, options, dependencies)
        self._init_recording(events)


class RecordingUserCommand(RecordingMixin, UserContextMenuCommand):
    def __init__(self, name, events=None, dependencies=None):
        super().__init__(name, "", None, dependencies)
        self._init_recording(events)


class RecordingChatCommand(RecordingMixin, ChatContextMenuCommand):
    def __init__(self, name, events=None, dependencies=None):
        super().__init__(name, "", dependencies)
        self._init_recording(events)


@pytest.fixture
def command_factory():
    """创建测试命令，所有命令共享同一个事件列表"""
    events = []
    classes = {
        "slash": RecordingSlashCommand,
        "user": RecordingUserCommand,
        "chat": RecordingChatCommand,
    }

    def _create(kind, name, **kwargs):
        return classes[kind](name, events=events, **kwargs)

    _create.events = events
    return _create


COMMAND_TEMPLATE = '''
from umeko.commands import SlashCommand


class Command(SlashCommand):
    def __init__(self):
        super().__init__({name!r}, {description!r}, group={group!r})

    async def execute(self, ctx, *args):
        await ctx.reply({description!r})
'''


@pytest.fixture
def write_command(tmp_path):
    """在临时目录中写入命令文件"""

    def _write(filename, name="echo", description="测试命令", group="", body=None):
        path = tmp_path / filename
        if body is None:
            body = COMMAND_TEMPLATE.format(name=name, description=description, group=group)
        path.write_text(body, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_interaction():
    """创建模拟Discord交互对象"""

    def _make(name, command_type=1, options=None, target_id=None):
        interaction = Mock(spec=discord.Interaction)
        interaction.type = discord.InteractionType.application_command
        interaction.data = {"name": name, "type": command_type, "options": options or []}
        if target_id is not None:
            interaction.data["target_id"] = str(target_id)

        interaction.user = Mock()
        interaction.user.id = 67890
        interaction.user.display_name = "TestUser"
        interaction.guild = Mock()
        interaction.guild.id = 12345
        interaction.guild.name = "Test Guild"
        interaction.channel = Mock()
        interaction.channel.id = 11111
        interaction.channel.send = AsyncMock()
        interaction.client = Mock()
        interaction.response = Mock()
        interaction.response.is_done = Mock(return_value=False)
        interaction.response.send_message = AsyncMock()
        interaction.response.defer = AsyncMock()
        interaction.followup = Mock()
        interaction.followup.send = AsyncMock()
        interaction.edit_original_response = AsyncMock()
        return interaction

    return _make


@pytest.fixture
def mock_client():
    """创建模拟Discord客户端"""
    client = Mock(spec=discord.Client)
    client.user = Mock()
    client.user.id = 999
    return client


@pytest.fixture(autouse=True)
def setup_logging():
    """设置测试日志"""
    # 禁用日志输出以保持测试输出清洁
    logging.getLogger("umeko").setLevel(logging.CRITICAL)
    yield
    logging.getLogger("umeko").setLevel(logging.NOTSET)


def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
