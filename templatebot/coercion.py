"""プロパティの文字列値をスロットの型へ変換するモジュール。"""

from __future__ import annotations

import math
import re
import struct
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

import discord

from .errors import MalformedValue, UnsupportedKind


class ValueKind(Enum):
    """スロットが宣言できる値の型。"""

    TEXT = "text"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    LONG = "long"
    SHORT = "short"
    BYTE = "byte"
    FLOAT = "float"
    DOUBLE = "double"
    CHARACTER = "character"
    COLOR = "color"
    PRESENCE = "presence"

    def __str__(self) -> str:
        return self.value


class PresenceState(Enum):
    """起動時のオンライン状態。未知のキーワードは UNKNOWN になる。"""

    ONLINE = "online"
    IDLE = "idle"
    DND = "dnd"
    INVISIBLE = "invisible"
    OFFLINE = "offline"
    UNKNOWN = ""

    @classmethod
    def from_key(cls, key: str) -> "PresenceState":
        normalized = key.strip().lower()
        for state in cls:
            if state is not cls.UNKNOWN and state.value == normalized:
                return state
        return cls.UNKNOWN


Converter = Callable[[str], Any]

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(NaN|Infinity|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?)[fFdD]?"
)
_HEX_COLOR_PATTERN = re.compile(r"[0-9a-fA-F]{1,6}")

# (最小値, 最大値)
_INTEGER_RANGES = {
    ValueKind.BYTE: (-(2**7), 2**7 - 1),
    ValueKind.SHORT: (-(2**15), 2**15 - 1),
    ValueKind.INTEGER: (-(2**31), 2**31 - 1),
    ValueKind.LONG: (-(2**63), 2**63 - 1),
}


def _to_text(raw: str) -> str:
    return raw


def _to_boolean(raw: str) -> bool:
    # "true" 以外はすべて False として扱う（厳密な検証はしない）
    return raw.lower() == "true"


def _integer_converter(kind: ValueKind) -> Converter:
    lower, upper = _INTEGER_RANGES[kind]

    def convert(raw: str) -> int:
        if not _INTEGER_PATTERN.fullmatch(raw):
            raise MalformedValue(raw, kind, "10進数の整数ではありません")
        value = int(raw)
        if not lower <= value <= upper:
            raise MalformedValue(raw, kind, f"範囲 {lower}..{upper} を超えています")
        return value

    return convert


def _parse_decimal(raw: str, kind: ValueKind) -> float:
    text = raw.strip()
    if not _FLOAT_PATTERN.fullmatch(text):
        raise MalformedValue(raw, kind, "数値ではありません")
    if text[-1] in "fFdD":
        text = text[:-1]
    return float(text)


def _to_double(raw: str) -> float:
    return _parse_decimal(raw, ValueKind.DOUBLE)


def _to_float(raw: str) -> float:
    value = _parse_decimal(raw, ValueKind.FLOAT)
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        # 単精度に丸める
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as exc:
        raise MalformedValue(raw, ValueKind.FLOAT, "単精度の範囲を超えています") from exc


def _to_character(raw: str) -> str:
    if not raw:
        raise MalformedValue(raw, ValueKind.CHARACTER, "空文字列です")
    return raw[0]


def _to_color(raw: str) -> discord.Colour:
    if not _HEX_COLOR_PATTERN.fullmatch(raw):
        raise MalformedValue(raw, ValueKind.COLOR, "16進数の RGB 値ではありません")
    return discord.Colour(int(raw, 16))


def _to_presence(raw: str) -> PresenceState:
    return PresenceState.from_key(raw)


DEFAULT_CONVERTERS: Mapping[ValueKind, Converter] = {
    ValueKind.TEXT: _to_text,
    ValueKind.BOOLEAN: _to_boolean,
    ValueKind.INTEGER: _integer_converter(ValueKind.INTEGER),
    ValueKind.LONG: _integer_converter(ValueKind.LONG),
    ValueKind.SHORT: _integer_converter(ValueKind.SHORT),
    ValueKind.BYTE: _integer_converter(ValueKind.BYTE),
    ValueKind.FLOAT: _to_float,
    ValueKind.DOUBLE: _to_double,
    ValueKind.CHARACTER: _to_character,
    ValueKind.COLOR: _to_color,
    ValueKind.PRESENCE: _to_presence,
}


class PropertyCoercer:
    """型ごとの変換関数を保持し、文字列を変換する。

    新しい型に対応する場合は ``register`` で変換関数を追加する。
    """

    def __init__(self, converters: Optional[Mapping[Any, Converter]] = None) -> None:
        self._converters: Dict[Any, Converter] = dict(
            DEFAULT_CONVERTERS if converters is None else converters
        )

    def register(self, kind: Any, converter: Converter) -> None:
        self._converters[kind] = converter

    def supports(self, kind: Any) -> bool:
        return kind in self._converters

    def coerce(self, raw: str, kind: Any) -> Any:
        """``raw`` を ``kind`` に変換する。

        対応していない型なら ``UnsupportedKind``、解釈できない値なら
        ``MalformedValue`` を送出する。
        """
        converter = self._converters.get(kind)
        if converter is None:
            raise UnsupportedKind(kind)
        try:
            return converter(raw)
        except MalformedValue:
            raise
        except (TypeError, ValueError) as exc:
            raise MalformedValue(raw, kind, str(exc)) from exc


def coerce(raw: str, kind: Any) -> Any:
    """既定の変換表で ``raw`` を変換する。"""
    return PropertyCoercer().coerce(raw, kind)
