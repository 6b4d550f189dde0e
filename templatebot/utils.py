"""Embed 作成やメンション文字列などの共通処理。"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import discord

from . import colors

# (名前, 値, inline)
EmbedField = Tuple[str, str, bool]


def make_embed(
    title: Optional[str],
    description: str,
    color: discord.Colour,
    fields: Iterable[EmbedField] = (),
) -> discord.Embed:
    embed = discord.Embed(title=title, description=description, color=color)
    for name, value, inline in fields:
        embed.add_field(name=name, value=value, inline=inline)
    return embed


def error_embed(message: str) -> discord.Embed:
    """エラー表示用の赤い Embed を作る。送信時刻を付ける。"""
    embed = make_embed("エラー", message, colors.RED)
    embed.timestamp = discord.utils.utcnow()
    return embed


def mention_user(user_id: int) -> str:
    return f"<@{user_id}>"


def mention_channel(channel_id: int) -> str:
    return f"<#{channel_id}>"


def link(text: str, url: str) -> str:
    """Markdown のリンクを返す。"""
    return f"[{text}]({url})"
