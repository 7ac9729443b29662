"""
命令描述符测试
"""

import discord
import pytest

from umeko.commands import (
    CommandType,
    CommandOption,
    SlashCommand,
    UserContextMenuCommand,
    ChatContextMenuCommand,
)
from umeko.core.lifecycle import BotPlugin


class Ping(SlashCommand):
    def __init__(self, **kwargs):
        super().__init__("ping", "检查延迟", **kwargs)

    async def execute(self, ctx, *args):
        pass


class Report(UserContextMenuCommand):
    def __init__(self):
        super().__init__("ping")

    async def execute(self, ctx, *args):
        pass


class Quote(ChatContextMenuCommand):
    def __init__(self):
        super().__init__("ping")

    async def execute(self, ctx, *args):
        pass


class TestCommandType:
    """测试命令种类编码"""

    def test_wire_codes(self):
        assert CommandType.SLASH == 1
        assert CommandType.USER_CONTEXT_MENU == 2
        assert CommandType.CHAT_CONTEXT_MENU == 3


class TestCommandBase:
    """测试命令基础属性"""

    def test_unique_id_differs_per_kind(self):
        ids = {Ping().unique_id, Report().unique_id, Quote().unique_id}
        assert len(ids) == 3
        assert Ping().unique_id == "1ping"

    def test_kind_from_class(self):
        assert Ping().type == CommandType.SLASH
        assert Report().type == CommandType.USER_CONTEXT_MENU
        assert Quote().type == CommandType.CHAT_CONTEXT_MENU

    def test_set_plugin(self):
        command = Ping()
        plugin = BotPlugin("core")
        command.set_plugin(plugin)
        assert command.plugin is plugin

    def test_abstract_execute_required(self):
        class Incomplete(SlashCommand):
            pass

        with pytest.raises(TypeError):
            Incomplete("broken")

    def test_defaults(self):
        command = Ping()
        assert command.group == ""
        assert command.options == []
        assert command.dependencies == []
        assert command.source_path is None


class TestCommandOption:
    """测试参数序列化"""

    def test_minimal_option(self):
        option = CommandOption("query", "搜索关键词")
        assert option.to_dict() == {
            "name": "query",
            "description": "搜索关键词",
            "type": discord.AppCommandOptionType.string.value,
        }

    def test_required_choices_and_nested(self):
        option = CommandOption(
            "mode",
            "模式",
            type=discord.AppCommandOptionType.integer,
            required=True,
            choices=[{"name": "快", "value": 1}],
            options=[CommandOption("inner", "内部")]
        )
        data = option.to_dict()

        assert data["type"] == 4
        assert data["required"] is True
        assert data["choices"] == [{"name": "快", "value": 1}]
        assert data["options"][0]["name"] == "inner"

    def test_slash_to_dict_serializes_mixed_options(self):
        raw = {"name": "raw", "description": "原始", "type": 3}
        command = Ping(options=[CommandOption("query", "关键词"), raw])
        data = command.to_dict()

        assert data["name"] == "ping"
        assert data["type"] == 1
        assert data["options"][0]["name"] == "query"
        assert data["options"][1] == raw
