"""
どこで: `engine.core.history`
何を: 直近サンプルを新しい順に保持する固定容量バッファ（末尾＝最古から捨てる）。
なぜ: 描画面の幅ぶんだけ過去の波形を保持し、スクロールする波形トレースを描くため。

補足:
- 容量は描画面のピクセル幅に追従する。縮小時は即座に古い側から切り詰め、再サンプリングはしない。
"""

from __future__ import annotations

from collections import deque
from typing import Iterator

import numpy as np


class HistoryBuffer:
    """新しい順のサンプル列（容量超過分は最古から破棄）。"""

    def __init__(self, capacity: int) -> None:
        self._capacity = self._validate(capacity)
        self._samples: deque[float] = deque()

    @staticmethod
    def _validate(capacity: int) -> int:
        # 幅 0 の描画面（最小化など）でも先頭参照できるよう 1 以上に丸める
        return max(1, int(capacity))

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        self._capacity = self._validate(value)
        self._truncate()

    def push(self, sample: float) -> None:
        """先頭に追加し、容量超過なら末尾（最古）を捨てる。"""
        self._samples.appendleft(float(sample))
        self._truncate()

    def _truncate(self) -> None:
        while len(self._samples) > self._capacity:
            self._samples.pop()

    def to_sequence(self) -> tuple[float, ...]:
        """新しい順のサンプル列を返す。"""
        return tuple(self._samples)

    def as_array(self) -> np.ndarray:
        """新しい順のサンプル列を float64 配列で返す（コピー）。"""
        return np.fromiter(self._samples, dtype=np.float64, count=len(self._samples))

    @property
    def newest(self) -> float | None:
        return self._samples[0] if self._samples else None

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)


__all__ = ["HistoryBuffer"]
