"""起動ログ（起動時の各処理の結果）を組み立てるモジュール。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Sequence

import discord

from . import colors
from .binder import BindingResult
from .results import Result
from .utils import make_embed

# Embed のフィールド値の最大文字数
FIELD_VALUE_LIMIT = 1024


@dataclass
class ReportField:
    name: str
    value: str
    inline: bool = False


@dataclass
class StartupReport:
    title: str
    description: str
    color: discord.Colour
    fields: List[ReportField] = field(default_factory=list)
    ok: bool = True

    def to_embed(self) -> discord.Embed:
        return make_embed(
            self.title,
            self.description,
            self.color,
            [(item.name, item.value, item.inline) for item in self.fields],
        )

    def to_text(self) -> str:
        sections = [self.title, self.description]
        sections.extend(f"[{item.name}]\n{item.value}" for item in self.fields)
        return "\n\n".join(sections)


def checklist(results: Mapping[str, Result]) -> List[str]:
    return [f"{result.emoji} {name}" for name, result in results.items()]


def chunk_lines(lines: Sequence[str], limit: int = FIELD_VALUE_LIMIT) -> List[str]:
    """改行区切りで ``limit`` 文字を超えないように行をまとめる。"""
    chunks: List[str] = []
    current = ""
    for line in lines:
        line = line[:limit]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            candidate = line
        current = candidate
    if current:
        chunks.append(current)
    return chunks


def _checklist_fields(name: str, results: Mapping[str, Result]) -> List[ReportField]:
    chunks = chunk_lines(checklist(results))
    return [
        ReportField(name if position == 0 else f"{name}（続き）", chunk)
        for position, chunk in enumerate(chunks)
    ]


def _property_summary(binding: BindingResult) -> ReportField:
    source = binding.source or "bot.properties"
    failures = binding.total - binding.successful
    if failures == 0:
        return ReportField(
            "Bot プロパティ",
            f"`{source}` から **{binding.total}** 件のプロパティを読み込みました（失敗 **0** 件）。",
        )
    return ReportField(
        "Bot プロパティのエラー",
        f"`{source}` の **{failures}**/**{binding.total}** 件のプロパティを読み込めませんでした。"
        "詳細はコンソールを確認してください。",
    )


def build_startup_report(
    bot_name: str,
    version: str,
    started_at: datetime,
    binding: BindingResult,
    tasks: Mapping[str, Result],
    color: discord.Colour = colors.WHITE,
) -> StartupReport:
    """起動ログを組み立てる。副作用はない。

    プロパティの読み込みに 1 件でも失敗した場合は色を赤にする。
    """
    report = StartupReport(
        title=f"{bot_name} 起動ログ",
        description=(
            f"起動時刻: {discord.utils.format_dt(started_at, 'T')}\n"
            f"バージョン: `{version or '不明'}`"
        ),
        color=color,
    )

    report.fields.append(_property_summary(binding))
    if not binding.ok:
        report.ok = False
        report.color = colors.RED

    report.fields.extend(_checklist_fields("プロパティ", binding.results))
    report.fields.extend(_checklist_fields("起動タスク", tasks))
    return report
