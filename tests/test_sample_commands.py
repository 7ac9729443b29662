"""
仓库自带命令的集成测试
"""

import os
from unittest.mock import Mock, AsyncMock

import discord
import pytest

from umeko.commands import CommandRegistry, CommandContext

COMMANDS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "commands")


@pytest.mark.integration
class TestSampleCommands:
    """测试 commands/ 目录下的命令"""

    def setup_method(self):
        self.registry = CommandRegistry()

    @pytest.mark.asyncio
    async def test_directory_loads(self):
        count = await self.registry.load_directory(COMMANDS_DIR)

        assert count == 3
        names = [entry["name"] for entry in self.registry.export_snapshot()]
        assert "ping" in names
        assert "help" in names
        assert "查看头像" in names

    @pytest.mark.asyncio
    async def test_help_lists_commands(self, make_interaction):
        await self.registry.load_directory(COMMANDS_DIR)
        interaction = make_interaction("help")
        ctx = CommandContext(interaction, registry=self.registry)

        await self.registry.get_slash_command("help").execute(ctx)

        kwargs = interaction.response.send_message.call_args.kwargs
        embed = kwargs["embed"]
        assert isinstance(embed, discord.Embed)
        assert any("/ping" in field.value for field in embed.fields)
        assert kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_avatar_fetches_target(self, make_interaction):
        await self.registry.load_directory(COMMANDS_DIR)
        interaction = make_interaction("查看头像", 2, target_id=555)
        target = Mock()
        target.display_name = "目标用户"
        target.display_avatar.url = "https://cdn.example/avatar.png"
        interaction.client.fetch_user = AsyncMock(return_value=target)
        ctx = CommandContext(interaction, registry=self.registry)

        await self.registry.get_user_context_menu_command("查看头像").execute(ctx)

        interaction.client.fetch_user.assert_called_once_with(555)
        interaction.response.send_message.assert_called_once()

    @pytest.mark.asyncio
    async def test_ping_reports_latency(self, make_interaction):
        await self.registry.load_directory(COMMANDS_DIR)
        interaction = make_interaction("ping")
        interaction.client.user = Mock()
        interaction.client.user.id = 999
        interaction.client.fetch_user = AsyncMock()
        interaction.client.latency = 0.03
        ctx = CommandContext(interaction, registry=self.registry)

        await self.registry.get_slash_command("ping").execute(ctx)

        interaction.response.defer.assert_called_once()
        embed = interaction.edit_original_response.call_args.kwargs["embed"]
        assert embed.title.startswith("🏓 Pong!")
        assert embed.fields[1].value == "**30.0ms**"
