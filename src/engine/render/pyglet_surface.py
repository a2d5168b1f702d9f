"""
どこで: `engine.render.pyglet_surface`
何を: `RenderSurface` の pyglet 実装。プリミティブを `pyglet.shapes` に変換して Batch に積み、`draw()` で描く。
なぜ: コアが出力したフレームを RenderWindow の `on_draw` から 1 回の Batch 描画で表示するため。

注意:
- キャンバス座標（y 下向き）を pyglet の座標（y 上向き）へ反転する。
- `clear()` で前フレームの図形を破棄する（Batch は使い回す）。
- 波形の折れ線は `shapes.MultiLine` 1 つで描く。
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
import pyglet
from pyglet import shapes

from util.color import normalize_color, to_u8_rgba

from .types import RGBA, Color

logger = logging.getLogger(__name__)

LINE_WIDTH = 1.0
WAVE_LINE_WIDTH = 2.0


class PygletSurface:
    """pyglet ウィンドウに紐づく描画面。

    Parameters
    ----------
    window : pyglet.window.Window
        サイズ取得元のウィンドウ（`width`/`height` を参照するだけ）。
    on_background : Callable[[RGBA], None] | None
        `clear()` で背景色が指定されたときに呼ぶ関数（RenderWindow.set_background_color を想定）。
    """

    def __init__(
        self,
        window: "pyglet.window.Window",
        *,
        on_background: Callable[[RGBA], None] | None = None,
    ) -> None:
        self._window = window
        self._on_background = on_background
        self._batch = pyglet.graphics.Batch()
        self._shapes: list[shapes.ShapeBase] = []
        self._closed = False

    @property
    def width(self) -> int:
        return int(self._window.width)

    @property
    def height(self) -> int:
        return int(self._window.height)

    def close(self) -> None:
        """以降の描画呼び出しを RuntimeError にする（ウィンドウ破棄時）。"""
        self._closed = True
        self._release()

    def _release(self) -> None:
        for s in self._shapes:
            s.delete()
        self._shapes.clear()

    def _check(self) -> None:
        if self._closed:
            raise RuntimeError("surface is closed")

    def _y(self, y: float) -> float:
        return float(self.height) - float(y)

    # ---- RenderSurface ----
    def clear(self, width: int, height: int, background: Color | None = None) -> None:
        self._check()
        self._release()
        if background is not None and self._on_background is not None:
            self._on_background(normalize_color(background))

    def stroke_circle(self, x: float, y: float, radius: float, color: Color) -> None:
        self._check()
        arc = shapes.Arc(
            float(x), self._y(y), float(radius), color=to_u8_rgba(color), batch=self._batch
        )
        self._shapes.append(arc)

    def fill_circle(self, x: float, y: float, radius: float, color: Color) -> None:
        self._check()
        c = shapes.Circle(
            float(x), self._y(y), float(radius), color=to_u8_rgba(color), batch=self._batch
        )
        self._shapes.append(c)

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None:
        self._check()
        line = shapes.Line(
            float(x1),
            self._y(y1),
            float(x2),
            self._y(y2),
            LINE_WIDTH,
            color=to_u8_rgba(color),
            batch=self._batch,
        )
        self._shapes.append(line)

    def stroke_polyline(self, points: np.ndarray, color: Color) -> None:
        self._check()
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if pts.shape[0] < 2:
            return
        flipped = np.column_stack((pts[:, 0], float(self.height) - pts[:, 1]))
        # 折れ線全体を 1 つの図形として積む
        line = shapes.MultiLine(
            *flipped.tolist(),
            thickness=WAVE_LINE_WIDTH,
            color=to_u8_rgba(color),
            batch=self._batch,
        )
        self._shapes.append(line)

    # ---- draw ----
    def draw(self) -> None:
        """現在のフレームを描く（`on_draw` から呼ぶ）。"""
        if self._closed:
            return
        self._batch.draw()


__all__ = ["PygletSurface"]
