"""環境変数と bot.properties から Bot 設定を読み込むモジュール。

bot.properties の各プロパティは ``build_slot_tree`` で宣言したスロットと
名前（大文字小文字を区別しない）で対応付けられる。新しいプロパティを
追加するときは ``BotConfig`` にフィールドを足し、``build_slot_tree`` に
スロットを 1 行追加する。
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import discord
from dotenv import load_dotenv

from .coercion import PresenceState, ValueKind
from .errors import ConfigSourceUnavailable
from .slots import SlotGroup, attribute_slot

logger = logging.getLogger(__name__)

DEFAULT_PROPERTIES_PATH = Path(__file__).resolve().parent / "resources" / "bot.properties"


@dataclass(frozen=True)
class Settings:
    token: str
    properties_path: Path = DEFAULT_PROPERTIES_PATH
    log_level: str = "INFO"


def load_settings() -> Settings:
    """環境変数（.env を含む）から起動設定を読み込む。"""
    load_dotenv()

    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    if not token:
        raise RuntimeError(
            "環境変数 DISCORD_BOT_TOKEN が設定されていません。"
        )

    properties_raw = os.getenv("TEMPLATEBOT_PROPERTIES", "").strip()
    properties_path = Path(properties_raw) if properties_raw else DEFAULT_PROPERTIES_PATH

    log_level = os.getenv("TEMPLATEBOT_LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        token=token,
        properties_path=properties_path,
        log_level=log_level,
    )


@dataclass
class SelfSettings:
    """Bot 自身のユーザー情報と説明・バージョン。"""

    id: int = 0
    name: str = ""
    description: str = ""
    version: str = ""


@dataclass
class GeneralSettings:
    enable_startup_message: bool = False
    prefix: str = "!"
    load_global_commands: bool = False
    load_local_commands: bool = False


@dataclass
class StatusSettings:
    """起動時のステータスとアクティビティ。"""

    status: PresenceState = PresenceState.UNKNOWN
    activity_type: str = ""
    activity_text: str = ""
    activity_url: str = ""
    activity: Optional[discord.BaseActivity] = None


@dataclass
class GuildIds:
    development: int = 0


@dataclass
class ChannelIds:
    log: int = 0


@dataclass
class IdSettings:
    guild: GuildIds = field(default_factory=GuildIds)
    channel: ChannelIds = field(default_factory=ChannelIds)


@dataclass
class ColorSettings:
    embed_color: discord.Colour = field(default_factory=lambda: discord.Colour(0xFFFFFF))


@dataclass
class BotConfig:
    """bot.properties の値を保持する設定オブジェクト。起動時に 1 度だけ書き込まれる。"""

    identity: SelfSettings = field(default_factory=SelfSettings)
    general: GeneralSettings = field(default_factory=GeneralSettings)
    status: StatusSettings = field(default_factory=StatusSettings)
    ids: IdSettings = field(default_factory=IdSettings)
    colors: ColorSettings = field(default_factory=ColorSettings)


def build_slot_tree(config: BotConfig) -> SlotGroup:
    """``config`` の各フィールドに対応するスロットの木を組み立てる。"""
    identity = config.identity
    general = config.general
    status = config.status
    return SlotGroup(
        name="BOT",
        children=[
            SlotGroup(
                name="SELF",
                slots=[
                    # ID と NAME はログイン中のユーザーから設定する
                    attribute_slot("ID", ValueKind.LONG, identity, "id", writable=False),
                    attribute_slot("NAME", ValueKind.TEXT, identity, "name", writable=False),
                    attribute_slot("DESCRIPTION", ValueKind.TEXT, identity, "description"),
                    attribute_slot("VERSION", ValueKind.TEXT, identity, "version"),
                ],
            ),
            SlotGroup(
                name="CONFIG",
                slots=[
                    attribute_slot("ENABLE_STARTUP_MESSAGE", ValueKind.BOOLEAN, general, "enable_startup_message"),
                    attribute_slot("PREFIX", ValueKind.TEXT, general, "prefix"),
                    attribute_slot("LOAD_GLOBAL_COMMANDS", ValueKind.BOOLEAN, general, "load_global_commands"),
                    attribute_slot("LOAD_LOCAL_COMMANDS", ValueKind.BOOLEAN, general, "load_local_commands"),
                ],
            ),
            SlotGroup(
                name="STATUS",
                slots=[
                    attribute_slot("STATUS", ValueKind.PRESENCE, status, "status"),
                    attribute_slot("ACTIVITY_TYPE", ValueKind.TEXT, status, "activity_type"),
                    attribute_slot("ACTIVITY_TEXT", ValueKind.TEXT, status, "activity_text"),
                    attribute_slot("ACTIVITY_URL", ValueKind.TEXT, status, "activity_url"),
                ],
            ),
            SlotGroup(
                name="ID",
                children=[
                    SlotGroup(
                        name="GUILD",
                        slots=[attribute_slot("DEVELOPMENT", ValueKind.LONG, config.ids.guild, "development")],
                    ),
                    SlotGroup(
                        name="CHANNEL",
                        slots=[attribute_slot("LOG", ValueKind.LONG, config.ids.channel, "log")],
                    ),
                ],
            ),
            SlotGroup(
                name="COLORS",
                slots=[attribute_slot("EMBED_COLOR", ValueKind.COLOR, config.colors, "embed_color")],
            ),
        ],
    )


@dataclass(frozen=True)
class PropertyEntry:
    key: str
    value: str


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_UNICODE_ESCAPE = re.compile(r"u([0-9a-fA-F]{4})")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
# 全角スペースなどは空白として扱わない
_WHITESPACE = " \t\f"


def _unescape(text: str) -> str:
    result: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\" or index + 1 >= len(text):
            result.append(char)
            index += 1
            continue
        following = text[index + 1]
        if following == "u":
            match = _UNICODE_ESCAPE.match(text, index + 1)
            if match is None:
                raise ValueError(f"不正な \\u エスケープです: {text[index:index + 6]!r}")
            result.append(chr(int(match.group(1), 16)))
            index = match.end()
            continue
        result.append(_ESCAPES.get(following, following))
        index += 2
    return "".join(result)


def _ends_with_continuation(line: str) -> bool:
    # 末尾のバックスラッシュが奇数個なら次の行へ続く
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _logical_lines(text: str) -> List[str]:
    lines: List[str] = []
    pending: Optional[str] = None
    for physical in _LINE_BREAK.split(text):
        stripped = physical.lstrip(_WHITESPACE)
        if pending is None:
            if not stripped or stripped[0] in "#!":
                continue
            current = stripped
        else:
            current = pending + stripped
        if _ends_with_continuation(current):
            pending = current[:-1]
            continue
        pending = None
        lines.append(current)
    if pending is not None:
        lines.append(pending)
    return lines


def _split_key_value(line: str) -> Tuple[str, str]:
    # キーは最初のエスケープされていない "=", ":" または空白までで終わる
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]
    rest = line[index:]
    if rest[:1] in ("=", ":"):
        return key, rest[1:].lstrip(_WHITESPACE)
    rest = rest.lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(text: str) -> List[PropertyEntry]:
    """properties 形式のテキストを解析する。

    ``#``/``!`` で始まる行はコメント、区切りは ``=``・``:``・空白のいずれか。
    末尾の ``\\`` で次の行へ継続する。キーは大文字小文字を区別せず、
    重複した場合は最後の値を採用する（位置は最初に現れた位置のまま）。
    """
    entries: Dict[str, PropertyEntry] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_key_value(line)
        key = _unescape(raw_key)
        value = _unescape(raw_value)
        normalized = key.upper()
        if normalized in entries:
            logger.warning("プロパティ '%s' が重複しています。最後の値を使用します。", key)
            key = entries[normalized].key
        entries[normalized] = PropertyEntry(key=key, value=value)
    return list(entries.values())


def read_properties(path: Path) -> List[PropertyEntry]:
    """設定ファイルを読み込む。開けない・読めない場合は ``ConfigSourceUnavailable``。"""
    try:
        with open(path, encoding="utf-8") as stream:
            text = stream.read()
    except FileNotFoundError as exc:
        logger.error("%s が見つかりません。パスを確認してください。", path)
        raise ConfigSourceUnavailable(f"{path} が見つかりません。") from exc
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("%s を読み込めませんでした: %s", path, exc)
        raise ConfigSourceUnavailable(f"{path} を読み込めませんでした。") from exc

    try:
        return parse_properties(text)
    except ValueError as exc:
        logger.error("%s の形式が不正です: %s", path, exc)
        raise ConfigSourceUnavailable(f"{path} の形式が不正です。") from exc
