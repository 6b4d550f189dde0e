"""Bot 起動時に 1 度だけ実行する処理。

bot.properties を読み込んで ``BotConfig`` に設定し、ステータスの設定と
スラッシュコマンドの同期を行ったあと、結果をログチャンネルへ送信する。

起動時に実行する処理を追加する場合は ``run_startup_tasks`` に追記し、
結果（``Result``）を ``results`` に入れると起動ログに表示される。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional

import discord
from discord.ext import commands

from .binder import BindingResult, load_configuration
from .coercion import PresenceState
from .config import BotConfig
from .errors import ConfigSourceUnavailable
from .presence import build_activity, to_discord_status
from .report import StartupReport, build_startup_report
from .results import Result
from .utils import mention_channel

if TYPE_CHECKING:
    from .main import TemplateBot

logger = logging.getLogger(__name__)

LOCAL_COMMAND_EXTENSIONS = ("templatebot.commands.local",)


def record_identity(bot: commands.Bot, config: BotConfig) -> None:
    """ログイン中のユーザーの ID と名前を設定に反映する。"""
    user = bot.user
    if user is None:
        return
    config.identity.id = user.id
    config.identity.name = user.name


async def set_presence(bot: commands.Bot, config: BotConfig) -> Result:
    """bot.properties のステータスとアクティビティを反映する。

    ステータスが UNKNOWN の場合は何もせず ``Result.OMITTED`` を返す。
    アクティビティ種別が空の場合はアクティビティなしでステータスだけを設定する。
    """
    status = config.status
    try:
        status.activity = build_activity(status.activity_type, status.activity_text, status.activity_url)
    except ValueError as exc:
        logger.error(
            "アクティビティの設定が不正なため、ステータスを設定しませんでした。"
            "activity_type, activity_text, activity_url を確認してください: %s",
            exc,
        )
        status.activity = None
        return Result.FAILURE

    if status.status is PresenceState.UNKNOWN:
        return Result.OMITTED

    if status.activity is None and status.activity_type.strip():
        logger.error("アクティビティ種別 '%s' は認識できません。", status.activity_type)
        return Result.FAILURE

    try:
        await bot.change_presence(status=to_discord_status(status.status), activity=status.activity)
    except Exception:
        logger.exception("ステータスとアクティビティの設定中に予期しないエラーが発生しました。")
        return Result.FAILURE

    logger.info("ステータスを %s に設定しました。", status.status.name)
    return Result.SUCCESS


async def sync_global_commands(bot: commands.Bot, config: BotConfig) -> Result:
    if not config.general.load_global_commands:
        return Result.OMITTED
    try:
        synced = await bot.tree.sync()
    except Exception:
        logger.exception("グローバルのスラッシュコマンドの同期中に予期しないエラーが発生しました。")
        return Result.FAILURE
    logger.info("グローバルのスラッシュコマンドを同期しました: %s", ", ".join(command.name for command in synced))
    return Result.SUCCESS


async def sync_local_commands(bot: commands.Bot, config: BotConfig) -> Result:
    """開発用サーバー向けのコマンドを読み込み、必要なら同期する。

    コマンドの読み込みは同期の設定に関係なく行う（同期済みのコマンドを処理するため）。
    """
    guild_id = config.ids.guild.development
    try:
        if guild_id:
            for extension in LOCAL_COMMAND_EXTENSIONS:
                if extension not in bot.extensions:
                    await bot.load_extension(extension)
                    logger.info("拡張機能 %s を読み込みました。", extension)

        if not config.general.load_local_commands:
            return Result.OMITTED
        if not guild_id:
            logger.error("開発用サーバーの ID (development) が設定されていないため、ローカルコマンドを同期できません。")
            return Result.FAILURE

        synced = await bot.tree.sync(guild=discord.Object(id=guild_id))
    except Exception:
        logger.exception("ローカルのスラッシュコマンドの同期中に予期しないエラーが発生しました。")
        return Result.FAILURE

    logger.info(
        "スラッシュコマンドをギルド %s に同期しました: %s",
        guild_id,
        ", ".join(command.name for command in synced),
    )
    return Result.SUCCESS


async def run_startup_tasks(bot: commands.Bot, config: BotConfig, results: Dict[str, Result]) -> None:
    results["ステータスとアクティビティの設定"] = await set_presence(bot, config)
    results["グローバルのスラッシュコマンドの登録"] = await sync_global_commands(bot, config)
    results["ローカルのスラッシュコマンドの登録"] = await sync_local_commands(bot, config)


async def send_log_message(bot: commands.Bot, config: BotConfig, report: StartupReport) -> bool:
    """起動ログを開発用サーバーのログチャンネルへ送信する。失敗しても例外は送出しない。"""
    guild = bot.get_guild(config.ids.guild.development)
    channel = guild.get_channel(config.ids.channel.log) if guild is not None else None
    target = mention_channel(config.ids.channel.log)
    if channel is None:
        logger.error(
            "開発用サーバーのログチャンネル %s を取得できなかったため、起動メッセージを送信できませんでした。"
            "bot.properties の ID を確認してください。",
            target,
        )
        return False

    try:
        await channel.send(embed=report.to_embed())
    except Exception:
        logger.exception("起動メッセージをログチャンネル %s へ送信できませんでした。", target)
        return False
    logger.info("起動メッセージをログチャンネル %s へ送信しました。", target)
    return True


async def run_startup(bot: "TemplateBot") -> Optional[StartupReport]:
    """起動処理を実行し、組み立てた起動ログを返す。

    bot.properties を読み込めなかった場合は以降の処理を行わず None を返す。
    """
    logger.info("起動処理を開始します。")
    logger.info("接続中のギルド: %d 件", len(bot.guilds))

    config = bot.bot_config
    record_identity(bot, config)

    try:
        binding: BindingResult = load_configuration(bot.settings.properties_path, config)
    except ConfigSourceUnavailable as exc:
        logger.error("bot.properties を読み込めなかったため、起動処理を中断します: %s", exc)
        return None

    results: Dict[str, Result] = {}
    if binding.ok:
        results[f"`{binding.source}` の読み込み"] = Result.SUCCESS
    else:
        results[f"`{binding.source}` の一部の読み込みに失敗"] = Result.FAILURE

    try:
        await run_startup_tasks(bot, config, results)
    except Exception:
        logger.exception("起動タスクの実行中にエラーが発生しました。")

    report = build_startup_report(
        bot_name=config.identity.name,
        version=config.identity.version,
        started_at=discord.utils.utcnow(),
        binding=binding,
        tasks=results,
        color=config.colors.embed_color,
    )

    if config.general.enable_startup_message:
        await send_log_message(bot, config, report)
    else:
        logger.debug("起動ログ:\n%s", report.to_text())

    logger.info("起動処理が完了しました。")
    return report


class Startup(commands.Cog):
    """最初の on_ready で起動処理を実行する Cog。"""

    def __init__(self, bot: "TemplateBot") -> None:
        self.bot = bot
        self.started = False
        self.report: Optional[StartupReport] = None

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self) -> None:
        # 再接続時にも on_ready が発生するため、2 回目以降は何もしない
        if self.started:
            logger.info("再接続しました。")
            return
        self.started = True
        self.report = await run_startup(self.bot)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Startup(bot))
