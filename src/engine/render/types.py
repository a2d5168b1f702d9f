"""
どこで: `engine.render` 型定義。
何を: 1 フレームを構成する描画プリミティブ（clear/円/線/ポリライン）と、描画面のプロトコル `RenderSurface`。
なぜ: コアは描画先を知らずにプリミティブ列だけを出力し、pyglet/記録用サーフェスを差し替え可能にするため。

座標系:
- キャンバス座標（px）。原点は左上、y は下向き（pyglet 実装側で反転する）。
- 色は Hex 文字列（"#RRGGBB" など、`util.color` が受理する形式）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

import numpy as np

RGBA = tuple[float, float, float, float]
Color = str


@dataclass(frozen=True)
class Clear:
    """描画面全体を背景色で塗りつぶす。"""

    width: int
    height: int
    background: Color | None = None  # None なら描画面の現在値を使用


@dataclass(frozen=True)
class StrokeCircle:
    x: float
    y: float
    radius: float
    color: Color


@dataclass(frozen=True)
class FillCircle:
    x: float
    y: float
    radius: float
    color: Color


@dataclass(frozen=True)
class StrokeLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color


@dataclass(frozen=True, eq=False)
class StrokePolyline:
    """折れ線。`points` は (N, 2) の float 配列。"""

    points: np.ndarray
    color: Color

    def __len__(self) -> int:
        return int(self.points.shape[0])


Primitive = Union[Clear, StrokeCircle, FillCircle, StrokeLine, StrokePolyline]


class RenderSurface(Protocol):
    """コアが書き込む描画面（Render Adapter）。"""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def clear(self, width: int, height: int, background: Color | None = None) -> None: ...

    def stroke_circle(self, x: float, y: float, radius: float, color: Color) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: Color) -> None: ...

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None: ...

    def stroke_polyline(self, points: np.ndarray, color: Color) -> None: ...


__all__ = [
    "RGBA",
    "Color",
    "Clear",
    "StrokeCircle",
    "FillCircle",
    "StrokeLine",
    "StrokePolyline",
    "Primitive",
    "RenderSurface",
]
