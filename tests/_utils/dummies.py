"""テスト用のフェイク（描画面/パラメータ供給）。"""

from __future__ import annotations

import numpy as np

from common.params import ParameterSet
from engine.render.surface import RecordingSurface
from engine.render.types import Color


class FailingSurface(RecordingSurface):
    """`fail_after` 回目以降の clear() で RuntimeError を送出する描画面（破棄済みキャンバス相当）。"""

    def __init__(self, width: int = 800, height: int = 400, *, fail_after: int = 0) -> None:
        super().__init__(width, height)
        self._fail_after = int(fail_after)
        self.calls = 0

    def clear(self, width: int, height: int, background: Color | None = None) -> None:
        self.calls += 1
        if self.calls > self._fail_after:
            raise RuntimeError("surface destroyed")
        super().clear(width, height, background)


class ParamsBox:
    """差し替え可能な ParameterSet 供給源（`box.get` をスケジューラへ渡す）。"""

    def __init__(self, params: ParameterSet | None = None) -> None:
        self.value = params or ParameterSet()
        self.reads = 0

    def get(self) -> ParameterSet:
        self.reads += 1
        return self.value


def polyline_ys(surface: RecordingSurface) -> np.ndarray:
    """直近フレームの波形折れ線の y 座標列を返す。"""
    from engine.render.types import StrokePolyline

    lines = surface.of_type(StrokePolyline)
    assert len(lines) == 1
    return lines[0].points[:, 1]  # type: ignore[union-attr]
