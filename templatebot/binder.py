"""プロパティをスロットへバインドするモジュール。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .coercion import PropertyCoercer
from .config import BotConfig, PropertyEntry, build_slot_tree, read_properties
from .errors import (
    MalformedValue,
    SlotNotFound,
    SlotNotWritable,
    UnsupportedKind,
)
from .results import Result
from .slots import SlotIndex, collect_slots, describe_slots

logger = logging.getLogger(__name__)


@dataclass
class BindingResult:
    """プロパティ名ごとのバインド結果（ファイル内の記述順）。"""

    results: Dict[str, Result] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for result in self.results.values() if result is Result.SUCCESS)

    @property
    def failed(self) -> List[str]:
        return [key for key, result in self.results.items() if result is Result.FAILURE]

    @property
    def ok(self) -> bool:
        return not self.failed

    def __getitem__(self, key: str) -> Result:
        return self.results[key]

    def __len__(self) -> int:
        return len(self.results)


def bind_property(
    key: str,
    value: str,
    index: SlotIndex,
    coercer: PropertyCoercer,
) -> Result:
    """1 つのプロパティを対応するスロットへ設定する。

    失敗しても例外は送出せず、ログに理由を出して ``Result.FAILURE`` を返す。
    変換に失敗したスロットは以前の値のまま残る。
    """
    name = key.upper()
    try:
        slot = index.get(name)
        if slot is None:
            raise SlotNotFound(name)
        if not slot.writable:
            raise SlotNotWritable(name)
        slot.set(coercer.coerce(value, slot.kind))
        return Result.SUCCESS
    except SlotNotFound:
        logger.error("名前 '%s' の設定スロットが見つかりません。このプロパティは設定されませんでした。", name)
    except SlotNotWritable:
        logger.error("プロパティ '%s' を設定できません。このスロットは読み取り専用です。", name)
    except UnsupportedKind as exc:
        logger.error("プロパティ '%s' を設定できません。%s", name, exc)
    except MalformedValue as exc:
        logger.error("プロパティ '%s' を設定できません。%s", name, exc)
    except Exception:
        logger.exception("プロパティ '%s' を設定できません。原因は不明です。", name)
    return Result.FAILURE


def bind_properties(
    entries: Iterable[PropertyEntry],
    index: SlotIndex,
    coercer: Optional[PropertyCoercer] = None,
) -> BindingResult:
    """プロパティを記述順にバインドし、キーごとの結果を返す。"""
    coercer = coercer or PropertyCoercer()
    binding = BindingResult()
    for entry in entries:
        binding.results[entry.key] = bind_property(entry.key, entry.value, index, coercer)
    return binding


def load_configuration(
    path: Path,
    config: BotConfig,
    coercer: Optional[PropertyCoercer] = None,
) -> BindingResult:
    """設定ファイルを読み込み、``config`` の各スロットへ値を設定する。

    ファイルを開けない・読めない場合のみ ``ConfigSourceUnavailable`` を送出する。
    個々のプロパティの失敗は結果に記録される。スロットを列挙できなかった場合は
    空の表でバインドするため、すべてのプロパティが失敗として記録される。
    """
    entries = read_properties(path)
    index = collect_slots(build_slot_tree(config))
    if index.failure is not None:
        logger.error("設定スロットを列挙できませんでした: %s", index.failure)
    logger.debug("設定スロット: %s", ", ".join(describe_slots(index)))

    binding = bind_properties(entries, index, coercer)
    binding.source = path.name

    failures = binding.total - binding.successful
    logger.info(
        "%s から %d 件のプロパティを読み込みました（失敗 %d 件）。",
        path.name,
        binding.total,
        failures,
    )
    return binding
