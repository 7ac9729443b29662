"""查看用户头像（用户右键菜单）"""
import discord

from umeko.commands import UserContextMenuCommand


class Command(UserContextMenuCommand):

    def __init__(self):
        super().__init__("查看头像")

    async def execute(self, ctx, *args) -> None:
        user = await ctx.client.fetch_user(ctx.target_id)
        embed = discord.Embed(title=f"{user.display_name} 的头像", color=discord.Color.blurple())
        embed.set_image(url=user.display_avatar.url)
        await ctx.reply(embed=embed, ephemeral=True)
