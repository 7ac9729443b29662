"""帮助命令，也会在只 @机器人 时触发"""
import discord

from umeko.commands import SlashCommand


class Command(SlashCommand):
    """列出所有已注册的斜杠命令"""

    def __init__(self):
        super().__init__("help", "显示可用命令")

    async def execute(self, ctx, *args) -> None:
        embed = discord.Embed(
            title="📖 可用命令",
            color=discord.Color.blue()
        )

        groups = {}
        for command in ctx.registry.slash_commands.values():
            groups.setdefault(command.group, []).append(command)

        for group, commands in sorted(groups.items()):
            prefix = f"/{group} " if group else "/"
            lines = [f"`{prefix}{c.name}` - {c.description}" for c in sorted(commands, key=lambda c: c.name)]
            embed.add_field(name=group or "通用", value="\n".join(lines), inline=False)

        menus = [c.name for c in ctx.registry.user_context_menu_commands.values()]
        menus += [c.name for c in ctx.registry.chat_context_menu_commands.values()]
        if menus:
            embed.add_field(name="右键菜单", value="、".join(menus), inline=False)

        await ctx.reply(embed=embed, ephemeral=True)
