"""延迟检测命令"""
import time
import discord

from umeko.commands import SlashCommand

# (上限毫秒, 指示, 描述, 颜色)
LATENCY_LEVELS = [
    (50, "🟢", "优秀", discord.Color.green()),
    (100, "🟡", "良好", discord.Color.gold()),
    (200, "🟠", "一般", discord.Color.orange()),
    (500, "🔴", "较差", discord.Color.red()),
]


def describe_latency(latency_ms: float) -> tuple:
    for limit, emoji, text, color in LATENCY_LEVELS:
        if latency_ms <= limit:
            return emoji, text, color
    return "⚠️", "很差", discord.Color.dark_red()


class Command(SlashCommand):
    """检测机器人的 Discord API 延迟和 WebSocket 延迟"""

    def __init__(self):
        super().__init__("ping", "检查机器人延迟和连接质量")

    async def execute(self, ctx, *args) -> None:
        await ctx.defer_reply()

        api_start = time.perf_counter()
        if ctx.client.user:
            await ctx.client.fetch_user(ctx.client.user.id)
        api_latency_ms = round((time.perf_counter() - api_start) * 1000, 2)
        websocket_latency_ms = round(ctx.client.latency * 1000, 2)

        emoji, text, color = describe_latency(max(api_latency_ms, websocket_latency_ms))
        embed = discord.Embed(
            title=f"🏓 Pong! {emoji}",
            description=f"连接质量: **{text}**",
            color=color
        )
        embed.add_field(name="Discord API 延迟", value=f"**{api_latency_ms}ms**", inline=True)
        embed.add_field(name="WebSocket 延迟", value=f"**{websocket_latency_ms}ms**", inline=True)

        await ctx.edit_reply(embed=embed)
