"""
どこで: `engine.render.scene`
何を: エピサイクル計算結果と履歴サンプルから、1 フレーム分の描画プリミティブ列を組み立てる。
なぜ: 何をどこに描くか（レイアウト）を純粋関数に閉じ込め、描画面の実装から切り離すため。

描画順:
1) 背景クリア
2) 各高調波: 円（show_circles 時のみ）→ 前の終点から新しい終点への線
3) 最終点マーカー（塗り円）
4) 最終点 → 波形の先頭を結ぶ線
5) 履歴サンプルの折れ線（新しいサンプルほど左）
"""

from __future__ import annotations

import numpy as np

from common.params import RenderStyle
from engine.core.epicycle import StepResult
from util.constants import CHAIN_CENTER_X, MARKER_RADIUS, WAVE_OFFSET_X

from .types import Clear, FillCircle, Primitive, StrokeCircle, StrokeLine, StrokePolyline


def wave_points(samples: np.ndarray, *, center_x: float, center_y: float) -> np.ndarray:
    """新しい順のサンプル列を (N, 2) の折れ線座標へ変換する（1 サンプル = 1px）。"""
    s = np.asarray(samples, dtype=np.float64).reshape(-1)
    pts = np.empty((s.shape[0], 2), dtype=np.float64)
    pts[:, 0] = center_x + WAVE_OFFSET_X + np.arange(s.shape[0], dtype=np.float64)
    pts[:, 1] = center_y + s
    return pts


def compose_frame(
    result: StepResult,
    samples: np.ndarray,
    *,
    width: int,
    height: int,
    style: RenderStyle,
) -> list[Primitive]:
    """1 フレーム分のプリミティブ列を返す。

    Parameters
    ----------
    result : StepResult
        今フレームのベクトル連鎖。
    samples : np.ndarray
        新しい順の履歴サンプル（先頭が今フレームのサンプルであること）。
    width, height : int
        描画面のサイズ [px]。
    style : RenderStyle
        色・円の表示設定。
    """
    cx = CHAIN_CENTER_X
    cy = float(height) / 2.0
    out: list[Primitive] = [Clear(int(width), int(height), style.background)]

    for i, v in enumerate(result.vectors):
        if style.show_circles:
            out.append(StrokeCircle(cx + v.origin_x, cy + v.origin_y, v.radius, style.circle_color(i)))
        out.append(
            StrokeLine(cx + v.origin_x, cy + v.origin_y, cx + v.end_x, cy + v.end_y, style.line_color)
        )

    fx, fy = result.final_point
    out.append(FillCircle(cx + fx, cy + fy, MARKER_RADIUS, style.line_color))

    pts = wave_points(samples, center_x=cx, center_y=cy)
    if pts.shape[0] > 0:
        head_x, head_y = float(pts[0, 0]), float(pts[0, 1])
        out.append(StrokeLine(cx + fx, cy + fy, head_x, head_y, style.line_color))
        out.append(StrokePolyline(pts, style.wave_color))
    return out


__all__ = ["compose_frame", "wave_points"]
