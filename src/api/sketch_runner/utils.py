"""
どこで: `api.sketch_runner.utils`（純粋関数/小ヘルパ）。
何を: FPS・キャンバスサイズ・時間刻み・初期設定（ParameterSet/RenderStyle/数式）の解決。
なぜ: `api.sketch` を薄く保ち、「明示引数 > 設定ファイル > 組み込み既定値」の優先順位をテスト可能にするため。
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from common.params import (
    DEFAULT_FORMULA,
    ParameterSet,
    RenderStyle,
    normalize_colors,
)
from common.settings import get as _get_settings
from util.color import parse_hex_color_str
from util.constants import DEFAULT_CANVAS_SIZE, DEFAULT_FPS, DEFAULT_TIME_STEP
from util.utils import config_section

logger = logging.getLogger(__name__)


def resolve_fps(
    requested_fps: int | None,
    *,
    default: int = DEFAULT_FPS,
    cfg: Mapping[str, Any] | None = None,
) -> int:
    """FPS を解決して 1 以上の int を返す。

    - 明示指定があればそれを優先（数値化できない/<=0 は既定へ）。
    - 次に環境変数 `HMD_FPS`、設定ファイル `animation.fps` の順。
    """
    if requested_fps is not None:
        try:
            return max(1, int(requested_fps))
        except (TypeError, ValueError):
            return max(1, int(default))
    env_fps = _get_settings().FPS
    if env_fps is not None:
        return max(1, int(env_fps))
    section = config_section("animation", dict(cfg) if cfg is not None else None)
    try:
        return max(1, int(section.get("fps", default)))
    except (TypeError, ValueError):
        return max(1, int(default))


def resolve_time_step(
    requested: float | None,
    *,
    cfg: Mapping[str, Any] | None = None,
) -> float:
    """角時間の基準増分を解決する（0 以上の有限値）。

    優先順位は `resolve_fps` と同じ（明示指定 > `HMD_TIME_STEP` > `animation.time_step` > 既定値）。
    """
    candidates: list[Any] = [requested]
    if requested is None:
        candidates.append(_get_settings().TIME_STEP)
        section = config_section("animation", dict(cfg) if cfg is not None else None)
        candidates.append(section.get("time_step"))
    for value in candidates:
        if value is None:
            continue
        try:
            v = float(value)
        except (TypeError, ValueError):
            if requested is not None:
                raise ValueError(f"invalid time_step: {requested!r}") from None
            continue
        if not math.isfinite(v) or v < 0.0:
            if requested is not None:
                raise ValueError(f"time_step must be a finite value >= 0, got {requested!r}")
            continue
        return v
    return DEFAULT_TIME_STEP


def resolve_canvas_size(
    canvas_size: tuple[int, int] | None,
    *,
    cfg: Mapping[str, Any] | None = None,
) -> tuple[int, int]:
    """描画ウィンドウのサイズ [px] を解決する。

    - タプル: `(width, height)` をそのまま（正であることを検証、不正は `ValueError`）
    - None: 設定ファイル `canvas.width/height`、無ければ `DEFAULT_CANVAS_SIZE`
    """
    if canvas_size is not None:
        try:
            w, h = int(canvas_size[0]), int(canvas_size[1])
        except (TypeError, ValueError, IndexError) as e:
            raise ValueError(f"invalid canvas_size tuple: {canvas_size}") from e
        if w <= 0 or h <= 0:
            raise ValueError(f"canvas_size must be positive, got: {(w, h)}")
        return w, h
    section = config_section("canvas", dict(cfg) if cfg is not None else None)
    dw, dh = DEFAULT_CANVAS_SIZE
    try:
        w = int(section.get("width", dw))
        h = int(section.get("height", dh))
    except (TypeError, ValueError):
        logger.warning("invalid canvas size in config; using %dx%d", dw, dh)
        return dw, dh
    if w <= 0 or h <= 0:
        logger.warning("non-positive canvas size in config; using %dx%d", dw, dh)
        return dw, dh
    return w, h


def _valid_color(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        parse_hex_color_str(value)
    except ValueError:
        logger.warning("ignored invalid color in config: %r", value)
        return None
    return value


def resolve_initial_settings(
    params: ParameterSet | None = None,
    style: RenderStyle | None = None,
    *,
    cfg: Mapping[str, Any] | None = None,
) -> tuple[ParameterSet, RenderStyle, str]:
    """初期 ParameterSet / RenderStyle / 数式テキストを解決する。

    明示指定された値はそのまま使い、未指定分は設定ファイル `defaults`/`canvas` から補う。
    """
    data = dict(cfg) if cfg is not None else None
    defaults = config_section("defaults", data)
    canvas = config_section("canvas", data)

    formula = defaults.get("formula")
    formula = str(formula) if isinstance(formula, str) else DEFAULT_FORMULA

    if params is None:
        params = ParameterSet.from_mapping({"formula": formula, **defaults})
    elif params.waveform.is_custom:
        formula = params.waveform.formula or ""

    if style is None:
        base = RenderStyle()
        colors = defaults.get("circle_colors")
        circle_colors = (
            tuple(c for c in (_valid_color(v) for v in colors) if c is not None)
            if isinstance(colors, list)
            else ()
        )
        style = RenderStyle(
            show_circles=bool(defaults.get("show_circles", base.show_circles)),
            circle_colors=normalize_colors(circle_colors),
            line_color=_valid_color(defaults.get("line_color")) or base.line_color,
            wave_color=_valid_color(defaults.get("wave_color")) or base.wave_color,
            background=_valid_color(canvas.get("background")) or base.background,
        )
    return params, style, formula


def resolve_autostart(requested: bool | None, *, cfg: Mapping[str, Any] | None = None) -> bool:
    if requested is not None:
        return bool(requested)
    section = config_section("animation", dict(cfg) if cfg is not None else None)
    return bool(section.get("autostart", True))


__all__ = [
    "resolve_fps",
    "resolve_time_step",
    "resolve_canvas_size",
    "resolve_initial_settings",
    "resolve_autostart",
]
