"""Discord Bot のエントリーポイント。"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

try:
    import discord
    from discord.ext import commands
except ModuleNotFoundError as exc:
    raise ModuleNotFoundError(
        "discord.py がインストールされていません。仮想環境を有効化し、"
        "`pip install -e .` を実行してください。"
    ) from exc

from .config import BotConfig, Settings, load_settings

logger = logging.getLogger(__name__)


COMMAND_EXTENSIONS = (
    "templatebot.startup",
    "templatebot.commands.general",
)


def resolve_prefix(bot: "TemplateBot", message: discord.Message) -> List[str]:
    """bot.properties の prefix を返す。未設定ならメンションのみを受け付ける。"""
    prefix = bot.bot_config.general.prefix
    if not prefix:
        return commands.when_mentioned(bot, message)
    return [prefix]


class TemplateBot(commands.Bot):
    """起動時に bot.properties を読み込む Bot クラス。"""

    def __init__(
        self,
        settings: Settings,
        bot_config: Optional[BotConfig] = None,
        *,
        intents: discord.Intents,
    ) -> None:
        self.settings = settings
        self.bot_config = bot_config or BotConfig()
        super().__init__(
            command_prefix=resolve_prefix,
            intents=intents,
            help_command=None,
        )

    async def setup_hook(self) -> None:
        for extension in COMMAND_EXTENSIONS:
            await self.load_extension(extension)
            logger.info("拡張機能 %s を読み込みました。", extension)


def configure_logging(level: str = "INFO") -> None:
    # 未知のレベル名なら getLevelName は "Level xxx" という文字列を返す
    numeric = logging.getLevelName(level)
    known = isinstance(numeric, int)
    logging.basicConfig(
        level=numeric if known else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if not known:
        logger.warning("ログレベル %r は認識できないため INFO を使用します。", level)


def create_bot(settings: Settings) -> TemplateBot:
    intents = discord.Intents.default()
    intents.message_content = True
    bot = TemplateBot(
        settings,
        intents=intents,
    )
    return bot


async def start_bot(settings: Settings) -> None:
    bot = create_bot(settings)
    async with bot:
        await bot.start(settings.token)


def run_bot() -> None:
    """同期コンテキストから Bot を起動する。"""
    settings = load_settings()
    configure_logging(settings.log_level)
    try:
        asyncio.run(start_bot(settings))
    except KeyboardInterrupt:
        logger.info("Bot を終了します。")


if __name__ == "__main__":
    run_bot()
