"""bot.properties のステータス設定を discord.py のオブジェクトへ変換する。"""

from __future__ import annotations

from typing import Optional

import discord

from .coercion import PresenceState

_STATUS_MAP = {
    PresenceState.ONLINE: discord.Status.online,
    PresenceState.IDLE: discord.Status.idle,
    PresenceState.DND: discord.Status.dnd,
    PresenceState.INVISIBLE: discord.Status.invisible,
    PresenceState.OFFLINE: discord.Status.offline,
}

# アクティビティ種別の名前と数値キー
_ACTIVITY_TYPES = {
    "playing": discord.ActivityType.playing,
    "default": discord.ActivityType.playing,
    "0": discord.ActivityType.playing,
    "streaming": discord.ActivityType.streaming,
    "1": discord.ActivityType.streaming,
    "listening": discord.ActivityType.listening,
    "2": discord.ActivityType.listening,
    "watching": discord.ActivityType.watching,
    "3": discord.ActivityType.watching,
    "competing": discord.ActivityType.competing,
    "5": discord.ActivityType.competing,
}


def to_discord_status(state: PresenceState) -> Optional[discord.Status]:
    """UNKNOWN の場合は None を返す。"""
    return _STATUS_MAP.get(state)


def build_activity(activity_type: str, text: str, url: str = "") -> Optional[discord.BaseActivity]:
    """アクティビティ種別・テキスト・URL から Activity を作る。

    種別が空または未知の場合は None を返す。テキストが空の場合や、
    配信（streaming）で URL が指定されていない場合は ValueError を送出する。
    """
    kind = _ACTIVITY_TYPES.get(activity_type.strip().lower())
    if kind is None:
        return None
    name = text.strip()
    if not name:
        raise ValueError("アクティビティのテキストが空です。")

    if kind is discord.ActivityType.playing:
        return discord.Game(name=name)
    if kind is discord.ActivityType.streaming:
        stream_url = url.strip()
        if not stream_url:
            raise ValueError("配信アクティビティには URL が必要です。")
        return discord.Streaming(name=name, url=stream_url)
    return discord.Activity(type=kind, name=name)
