"""どのサーバーでも使える基本コマンド。"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from ..config import BotConfig
from ..utils import error_embed, link, make_embed, mention_user

logger = logging.getLogger(__name__)


def build_help_embed(config: BotConfig) -> discord.Embed:
    """Bot の説明とバージョンを表示する Embed を作る。"""
    name = config.identity.name
    # ログイン後は ID が入るのでメンションで名乗る
    speaker = mention_user(config.identity.id) if config.identity.id else name
    fields = [("バージョン", f"現在 `{config.identity.version}` で動作しています。", True)]
    status = config.status
    if status.activity_url:
        fields.append(("配信", link(status.activity_text or status.activity_url, status.activity_url), True))
    return make_embed(
        f"{name} について",
        f"こんにちは、{speaker} です！{config.identity.description}",
        config.colors.embed_color,
        fields,
    )


class General(commands.Cog):
    """遅延確認とヘルプ。"""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @commands.hybrid_command(name="ping", description="Pong! を返します。")
    async def ping(self, ctx: commands.Context) -> None:
        """Bot の応答性を確認する。"""
        latency_ms = round(self.bot.latency * 1000)
        await ctx.reply(f"Pong! {latency_ms}ms")

    @commands.command(name="pong")
    async def pong(self, ctx: commands.Context) -> None:
        await ctx.reply("Ping!")

    @commands.hybrid_command(name="help", description="Bot の情報を表示します。")
    async def help(self, ctx: commands.Context) -> None:
        await ctx.send(embed=build_help_embed(self.bot.bot_config), ephemeral=True)

    @commands.Cog.listener(name="on_command_error")
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CommandNotFound):
            await ctx.send(embed=error_embed("そのコマンドは認識できません。"))
            return
        logger.error("コマンド %s の実行中にエラーが発生しました。", ctx.command, exc_info=error)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(General(bot))
