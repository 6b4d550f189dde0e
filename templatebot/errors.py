"""設定の読み込み・バインドで発生する例外。"""

from __future__ import annotations

from typing import Optional


class ConfigError(Exception):
    """設定関連の例外の基底クラス。"""


class UnsupportedKind(ConfigError):
    """スロットの型に対応する変換関数が登録されていない。"""

    def __init__(self, kind: object) -> None:
        super().__init__(f"型 {kind!r} には対応していません。")
        self.kind = kind


class MalformedValue(ConfigError):
    """文字列を指定の型として解釈できない。"""

    def __init__(self, raw: str, kind: object, reason: Optional[str] = None) -> None:
        message = f"{raw!r} を {kind} として解釈できません。"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.raw = raw
        self.kind = kind


class SlotNotFound(ConfigError):
    """プロパティ名に一致するスロットがない。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"名前 '{name}' のスロットが見つかりません。")
        self.name = name


class SlotNotWritable(ConfigError):
    """スロットは存在するが書き込みできない。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"スロット '{name}' は読み取り専用です。")
        self.name = name


class ConfigSourceUnavailable(ConfigError):
    """設定ファイルを開けない、または読み込めない。"""
