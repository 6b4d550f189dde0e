"""Embed などで使う色の定数（Discord のブランドカラー）。"""

from __future__ import annotations

import discord

# 現行のパレット https://discord.com/branding
BLURPLE = discord.Colour(0x5865F2)
GREEN = discord.Colour(0x57F287)
YELLOW = discord.Colour(0xFEE75C)
FUCHSIA = discord.Colour(0xEB459E)
RED = discord.Colour(0xED4245)
WHITE = discord.Colour(0xFFFFFF)
BLACK = discord.Colour(0x000000)

# 旧パレット
BLURPLE_OLD = discord.Colour(0x7289DA)
GREYPLE = discord.Colour(0x99AAB5)
DARK_NOT_BLACK = discord.Colour(0x2C2F33)
NOT_QUITE_BLACK = discord.Colour(0x23272A)
