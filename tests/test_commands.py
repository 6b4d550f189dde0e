"""Tests for the command cogs and prefix resolution."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict, List

import discord
import pytest
from discord.ext import commands

from templatebot.commands.general import General, build_help_embed
from templatebot.commands.local import Local
from templatebot.config import BotConfig
from templatebot.main import configure_logging, resolve_prefix


class FakeContext:
    def __init__(self) -> None:
        self.replies: List[str] = []
        self.sent: List[Dict[str, Any]] = []
        self.command = None

    async def reply(self, content: str) -> None:
        self.replies.append(content)

    async def send(self, **kwargs: Any) -> None:
        self.sent.append(kwargs)


class FakeResponse:
    def __init__(self) -> None:
        self.messages: List[str] = []

    async def send_message(self, content: str) -> None:
        self.messages.append(content)


def _bot(**overrides: Any) -> SimpleNamespace:
    config = BotConfig()
    config.identity.name = "TemplateBot"
    config.identity.description = "テスト用の Bot です。"
    config.identity.version = "1.2.3"
    values = {"latency": 0.0421, "bot_config": config, "user": SimpleNamespace(id=99)}
    values.update(overrides)
    return SimpleNamespace(**values)


def test_help_embed_shows_description_and_version() -> None:
    config = _bot().bot_config

    embed = build_help_embed(config)

    assert embed.title == "TemplateBot について"
    assert "テスト用の Bot です。" in embed.description
    assert embed.fields[0].name == "バージョン"
    assert "`1.2.3`" in embed.fields[0].value
    assert embed.colour == config.colors.embed_color


@pytest.mark.asyncio
async def test_ping_reports_latency() -> None:
    cog = General(_bot())
    ctx = FakeContext()

    await cog.ping.callback(cog, ctx)

    assert ctx.replies == ["Pong! 42ms"]


@pytest.mark.asyncio
async def test_pong_replies_with_ping() -> None:
    cog = General(_bot())
    ctx = FakeContext()

    await cog.pong.callback(cog, ctx)

    assert ctx.replies == ["Ping!"]


@pytest.mark.asyncio
async def test_help_is_ephemeral() -> None:
    cog = General(_bot())
    ctx = FakeContext()

    await cog.help.callback(cog, ctx)

    assert ctx.sent[0]["ephemeral"] is True
    assert ctx.sent[0]["embed"].title == "TemplateBot について"


@pytest.mark.asyncio
async def test_unknown_command_gets_error_embed() -> None:
    cog = General(_bot())
    ctx = FakeContext()

    await cog.on_command_error(ctx, commands.CommandNotFound('Command "dance" is not found'))

    embed = ctx.sent[0]["embed"]
    assert embed.title == "エラー"
    assert "認識できません" in embed.description


@pytest.mark.asyncio
async def test_other_command_errors_are_only_logged() -> None:
    cog = General(_bot())
    ctx = FakeContext()

    await cog.on_command_error(ctx, commands.CommandError("boom"))

    assert ctx.sent == []


@pytest.mark.asyncio
async def test_hello_greets_member_by_display_name() -> None:
    cog = Local(_bot())
    response = FakeResponse()
    interaction = SimpleNamespace(user=SimpleNamespace(display_name="Alice"), response=response)

    await cog.hello.callback(cog, interaction)

    assert response.messages == ["こんにちは、Alice さん！"]


def test_prefix_comes_from_config() -> None:
    bot = _bot()
    bot.bot_config.general.prefix = "?"

    assert resolve_prefix(bot, SimpleNamespace()) == ["?"]


def test_empty_prefix_falls_back_to_mentions() -> None:
    bot = _bot()
    bot.bot_config.general.prefix = ""

    prefixes = resolve_prefix(bot, SimpleNamespace())

    assert "<@99> " in prefixes
    assert all(isinstance(prefix, str) for prefix in prefixes)


def test_help_embed_uses_configured_color() -> None:
    config = BotConfig()
    config.colors.embed_color = discord.Colour(0x123456)

    assert build_help_embed(config).colour.value == 0x123456


def test_help_embed_mentions_bot_and_links_stream() -> None:
    config = _bot().bot_config
    config.identity.id = 1234
    config.status.activity_text = "配信中"
    config.status.activity_url = "https://twitch.tv/example"

    embed = build_help_embed(config)

    assert "こんにちは、<@1234> です！" in embed.description
    assert embed.fields[1].name == "配信"
    assert embed.fields[1].value == "[配信中](https://twitch.tv/example)"


def test_configure_logging_accepts_level_names(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("DEBUG")
    configure_logging("root")

    assert calls[0]["level"] == logging.DEBUG
    assert calls[1]["level"] == logging.INFO
