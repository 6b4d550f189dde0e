"""起動処理の各タスクとプロパティのバインド結果。"""

from __future__ import annotations

from enum import Enum


class Result(Enum):
    """起動タスクの結果。

    - SUCCESS: 正常に完了した
    - FAILURE: 失敗した、または例外が発生した
    - OMITTED: 設定などにより実行されなかった
    """

    SUCCESS = "success"
    FAILURE = "failure"
    OMITTED = "omitted"

    @property
    def emoji(self) -> str:
        return _EMOJI[self]


_EMOJI = {
    Result.SUCCESS: "✅",
    Result.FAILURE: "❌",
    Result.OMITTED: "⛔",
}
