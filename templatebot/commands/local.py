"""開発用サーバーだけで使うコマンド。"""

from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands


class Local(commands.Cog):
    """開発用サーバー向けのサンプルコマンド。"""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="hello", description="開発用サーバー向けのサンプルコマンドです。")
    async def hello(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(f"こんにちは、{interaction.user.display_name} さん！")


async def setup(bot: commands.Bot) -> None:
    guild = discord.Object(id=bot.bot_config.ids.guild.development)
    await bot.add_cog(Local(bot), guild=guild)
