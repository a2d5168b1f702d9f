"""
どこで: `engine.core.epicycle`
何を: 角時間とパラメータから回転ベクトル（エピサイクル）の連鎖を計算し、各ベクトルと最終点を返す。
なぜ: x 成分は純粋な cos 回転、y 成分は選択波形とすることで、円の連鎖を任意周期波形の合成器として描くため。

アルゴリズム:
    原点 (0, 0) から i = 0..k-1 について
        n = 2i + 1
        r = base_radius · 4 / (n·π)
        p += (r·cos(n·t), r·amplitude(n, t))
    最終位置が `final_point`、その y 成分が履歴に積むサンプル。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from common.formula import FormulaEvaluator
from common.params import ParameterSet
from common.waveform import amplitude


@dataclass(frozen=True)
class Vector:
    """1 本の回転ベクトル（前の終点 → 新しい終点）。"""

    origin_x: float
    origin_y: float
    end_x: float
    end_y: float
    radius: float
    harmonic: int

    @property
    def dx(self) -> float:
        return self.end_x - self.origin_x

    @property
    def dy(self) -> float:
        return self.end_y - self.origin_y


@dataclass(frozen=True)
class StepResult:
    """1 フレーム分の計算結果。"""

    vectors: tuple[Vector, ...]
    final_point: tuple[float, float]

    @property
    def sample(self) -> float:
        """履歴へ積むサンプル（最終点の縦方向オフセット）。"""
        return self.final_point[1]


def harmonic_index(i: int) -> int:
    """i 番目のベクトルの高調波番号（奇数のみ）。"""
    return 2 * i + 1


def harmonic_radius(base_radius: float, n: int) -> float:
    """高調波 n の半径 `base_radius·4/(n·π)`。"""
    return base_radius * 4.0 / (n * math.pi)


def step(
    angular_time: float,
    params: ParameterSet,
    *,
    evaluator: FormulaEvaluator | None = None,
) -> StepResult:
    """角時間 `angular_time` におけるベクトル連鎖を計算する。"""
    t = float(angular_time)
    x = 0.0
    y = 0.0
    vectors: list[Vector] = []
    for i in range(max(1, int(params.harmonic_count))):
        n = harmonic_index(i)
        radius = harmonic_radius(params.base_radius, n)
        prev_x, prev_y = x, y
        x += radius * math.cos(n * t)
        y += radius * amplitude(n, t, params.waveform, evaluator=evaluator)
        vectors.append(Vector(prev_x, prev_y, x, y, radius, n))
    return StepResult(vectors=tuple(vectors), final_point=(x, y))


__all__ = ["Vector", "StepResult", "harmonic_index", "harmonic_radius", "step"]
