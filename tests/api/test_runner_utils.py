from __future__ import annotations

import pytest

from api.sketch_runner.utils import (
    resolve_autostart,
    resolve_canvas_size,
    resolve_fps,
    resolve_initial_settings,
    resolve_time_step,
)
from common.params import DEFAULT_FORMULA, ParameterSet, RenderStyle, Waveform
from util.constants import DEFAULT_CANVAS_SIZE


def test_resolve_fps_precedence() -> None:
    assert resolve_fps(30, cfg={}) == 30
    assert resolve_fps(0, cfg={}) == 1
    assert resolve_fps("x", cfg={}) == 60  # type: ignore[arg-type]
    assert resolve_fps(None, cfg={"animation": {"fps": 24}}) == 24
    assert resolve_fps(None, cfg={"animation": {"fps": "bad"}}) == 60
    assert resolve_fps(None, cfg={}) == 60


def test_resolve_fps_env_overrides_config(hmd_env: pytest.MonkeyPatch) -> None:
    from common import settings

    hmd_env.setenv("HMD_FPS", "15")
    settings.reload_from_env()
    assert resolve_fps(None, cfg={"animation": {"fps": 24}}) == 15


def test_resolve_time_step() -> None:
    assert resolve_time_step(0.5, cfg={}) == 0.5
    assert resolve_time_step(None, cfg={"animation": {"time_step": 0.02}}) == 0.02
    assert resolve_time_step(None, cfg={"animation": {"time_step": -1}}) == pytest.approx(0.01)
    with pytest.raises(ValueError):
        resolve_time_step(float("nan"), cfg={})
    with pytest.raises(ValueError):
        resolve_time_step("fast", cfg={})  # type: ignore[arg-type]


def test_resolve_time_step_env_overrides_config(hmd_env: pytest.MonkeyPatch) -> None:
    from common import settings

    hmd_env.setenv("HMD_TIME_STEP", "0.05")
    settings.reload_from_env()
    assert resolve_time_step(None, cfg={"animation": {"time_step": 0.02}}) == pytest.approx(0.05)
    # 明示指定は環境変数より優先
    assert resolve_time_step(0.5, cfg={}) == 0.5


def test_resolve_time_step_without_env_uses_config(hmd_env: pytest.MonkeyPatch) -> None:
    from common import settings

    hmd_env.delenv("HMD_TIME_STEP", raising=False)
    settings.reload_from_env()
    assert settings.get().TIME_STEP is None
    assert resolve_time_step(None, cfg={"animation": {"time_step": 0.02}}) == pytest.approx(0.02)


def test_resolve_canvas_size() -> None:
    assert resolve_canvas_size((640, 480), cfg={}) == (640, 480)
    assert resolve_canvas_size(None, cfg={"canvas": {"width": 300, "height": 200}}) == (300, 200)
    assert resolve_canvas_size(None, cfg={}) == DEFAULT_CANVAS_SIZE
    assert resolve_canvas_size(None, cfg={"canvas": {"width": -3}}) == DEFAULT_CANVAS_SIZE
    with pytest.raises(ValueError):
        resolve_canvas_size((0, 10), cfg={})
    with pytest.raises(ValueError):
        resolve_canvas_size(("a", "b"), cfg={})  # type: ignore[arg-type]


def test_resolve_initial_settings_from_config() -> None:
    cfg = {
        "canvas": {"background": "#000000"},
        "defaults": {
            "harmonic_count": 4,
            "waveform": "custom",
            "formula": "x^2",
            "show_circles": False,
            "line_color": "not-a-color",
            "circle_colors": ["#ff0000", 12],
        },
    }
    params, style, formula = resolve_initial_settings(cfg=cfg)
    assert params.harmonic_count == 4
    assert params.waveform == Waveform.custom("x^2")
    assert formula == "x^2"
    assert style.show_circles is False
    assert style.background == "#000000"
    assert style.line_color == RenderStyle().line_color
    assert style.circle_colors == ("#ff0000",)


def test_resolve_initial_settings_explicit_wins() -> None:
    p = ParameterSet(harmonic_count=2)
    st = RenderStyle(show_circles=False)
    params, style, formula = resolve_initial_settings(p, st, cfg={"defaults": {"harmonic_count": 9}})
    assert params is p
    assert style is st
    assert formula == DEFAULT_FORMULA


def test_resolve_autostart() -> None:
    assert resolve_autostart(False, cfg={}) is False
    assert resolve_autostart(None, cfg={}) is True
    assert resolve_autostart(None, cfg={"animation": {"autostart": False}}) is False
