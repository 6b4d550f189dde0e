"""設定スロットの宣言と、スロット名での検索用インデックス。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .coercion import ValueKind
from .errors import SlotNotWritable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigSlot:
    """名前と型を持つ設定値。setter がなければ読み取り専用。"""

    name: str
    kind: ValueKind
    getter: Callable[[], Any]
    setter: Optional[Callable[[Any], None]] = None

    @property
    def writable(self) -> bool:
        return self.setter is not None

    def get(self) -> Any:
        return self.getter()

    def set(self, value: Any) -> None:
        if self.setter is None:
            raise SlotNotWritable(self.name)
        self.setter(value)


@dataclass
class SlotGroup:
    """スロットと子グループを持つ名前付きグループ。"""

    name: str
    slots: Sequence[ConfigSlot] = field(default_factory=list)
    children: Sequence["SlotGroup"] = field(default_factory=list)


def attribute_slot(
    name: str,
    kind: ValueKind,
    target: object,
    attribute: str,
    *,
    writable: bool = True,
) -> ConfigSlot:
    """``target.attribute`` を読み書きするスロットを作る。"""

    def getter() -> Any:
        return getattr(target, attribute)

    def setter(value: Any) -> None:
        setattr(target, attribute, value)

    return ConfigSlot(name=name, kind=kind, getter=getter, setter=setter if writable else None)


@dataclass
class SlotIndex:
    """フラット化したスロット表。検索時は名前を大文字に正規化する。"""

    slots: Dict[str, ConfigSlot] = field(default_factory=dict)
    groups: Dict[str, str] = field(default_factory=dict)
    failure: Optional[str] = None

    def get(self, name: str) -> Optional[ConfigSlot]:
        return self.slots.get(name.upper())

    def group_of(self, name: str) -> Optional[str]:
        return self.groups.get(name.upper())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self.slots

    def __iter__(self) -> Iterator[str]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)


def walk_groups(root: SlotGroup, path: str = "") -> Iterator[Tuple[str, SlotGroup]]:
    """``(グループのパス, グループ)`` を前順で列挙する。"""
    current = f"{path}.{root.name}" if path else root.name
    yield current, root
    for child in list(root.children):
        yield from walk_groups(child, current)


def collect_slots(root: SlotGroup) -> SlotIndex:
    """グループ木のスロットをすべて集めて 1 つの表にまとめる。

    同名のスロットが複数ある場合は先に見つかった方を残し、警告を出す。
    グループの列挙自体に失敗した場合は空の表を返し、``failure`` に理由を入れる。
    """
    index = SlotIndex()
    try:
        for path, group in walk_groups(root):
            for slot in list(group.slots):
                key = slot.name.upper()
                if key in index.slots:
                    logger.warning(
                        "スロット名 '%s' が重複しています（%s と %s）。後から見つかった方を無視します。",
                        slot.name,
                        index.groups[key],
                        path,
                    )
                    continue
                index.slots[key] = slot
                index.groups[key] = path
    except Exception as exc:
        logger.error("設定グループ '%s' のスロットを列挙できませんでした: %s", root.name, exc)
        return SlotIndex(failure=f"{type(exc).__name__}: {exc}")
    return index


def describe_slots(index: SlotIndex) -> List[str]:
    """``GROUP.NAME (kind)`` 形式の一覧を返す。"""
    return [f"{index.groups[key]}.{slot.name} ({slot.kind})" for key, slot in index.slots.items()]
