"""
どこで: `engine.render.surface`
何を: プリミティブ列を描画面へ流し込む `dispatch()` と、描画呼び出しを記録するだけの `RecordingSurface`。
なぜ: ウィンドウ無し（テスト/init_only）でもフレーム生成の経路をそのまま検証できるようにするため。
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .types import (
    Clear,
    Color,
    FillCircle,
    Primitive,
    RenderSurface,
    StrokeCircle,
    StrokeLine,
    StrokePolyline,
)


def dispatch(surface: RenderSurface, primitives: Iterable[Primitive]) -> int:
    """プリミティブを順に描画面へ送る。送った個数を返す。"""
    count = 0
    for p in primitives:
        if isinstance(p, Clear):
            surface.clear(p.width, p.height, p.background)
        elif isinstance(p, StrokeCircle):
            surface.stroke_circle(p.x, p.y, p.radius, p.color)
        elif isinstance(p, FillCircle):
            surface.fill_circle(p.x, p.y, p.radius, p.color)
        elif isinstance(p, StrokeLine):
            surface.stroke_line(p.x1, p.y1, p.x2, p.y2, p.color)
        elif isinstance(p, StrokePolyline):
            surface.stroke_polyline(p.points, p.color)
        else:
            raise TypeError(f"unsupported primitive: {type(p)!r}")
        count += 1
    return count


class RecordingSurface:
    """描画呼び出しをプリミティブとして記録する描画面。

    `clear()` で直近フレームの記録をリセットするため、`primitives` は常に最新フレームの内容。
    """

    def __init__(self, width: int = 800, height: int = 400) -> None:
        self._width = int(width)
        self._height = int(height)
        self.primitives: list[Primitive] = []
        self.frames = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        self._width = int(width)
        self._height = int(height)

    def clear(self, width: int, height: int, background: Color | None = None) -> None:
        self.frames += 1
        self.primitives = [Clear(int(width), int(height), background)]

    def stroke_circle(self, x: float, y: float, radius: float, color: Color) -> None:
        self.primitives.append(StrokeCircle(x, y, radius, color))

    def fill_circle(self, x: float, y: float, radius: float, color: Color) -> None:
        self.primitives.append(FillCircle(x, y, radius, color))

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None:
        self.primitives.append(StrokeLine(x1, y1, x2, y2, color))

    def stroke_polyline(self, points: np.ndarray, color: Color) -> None:
        self.primitives.append(StrokePolyline(np.array(points, dtype=np.float64), color))

    def of_type(self, kind: type) -> list[Primitive]:
        """直近フレームから指定型のプリミティブだけを返す。"""
        return [p for p in self.primitives if isinstance(p, kind)]


__all__ = ["dispatch", "RecordingSurface"]
