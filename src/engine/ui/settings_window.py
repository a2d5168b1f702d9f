"""
どこで: `engine.ui.settings_window` の Dear PyGui 実装。
何を: SettingsStore を編集するコントロールパネル（半径/速度/周波数/円の数/円の表示/波形/色/数式/プリセット）と
      再生/一時停止・PNG 書き出しボタンを持つ別ウィンドウ。
なぜ: 描画ウィンドウ（pyglet）とは独立に設定を操作し、変更を Store 経由でスケジューラへ届けるため。

ドライバ:
- pyglet の `clock.schedule_interval` から `render_dearpygui_frame()` を呼ぶ（メインスレッド）。
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import dearpygui.dearpygui as dpg  # type: ignore
import pyglet

from common.params import WAVEFORM_KINDS
from common.presets import formula_presets
from util.color import to_hex_rgb, to_u8_rgba
from util.constants import FREQUENCY_RANGE, HARMONICS_RANGE, RADIUS_RANGE, SPEED_RANGE

from .settings import SettingsStore

logger = logging.getLogger(__name__)

ROOT_TAG = "__hmd_settings_root__"
CIRCLE_COLORS_TAG = "__hmd_circle_colors__"
FORMULA_INPUT_TAG = "__hmd_formula_input__"
FORMULA_ERROR_TAG = "__hmd_formula_error__"
RUN_BUTTON_TAG = "__hmd_run_button__"

_TAGS = {
    "base_radius": "__hmd_radius__",
    "speed_multiplier": "__hmd_speed__",
    "frequency": "__hmd_frequency__",
    "harmonic_count": "__hmd_harmonics__",
    "show_circles": "__hmd_show_circles__",
    "waveform": "__hmd_waveform__",
    "line_color": "__hmd_line_color__",
    "wave_color": "__hmd_wave_color__",
}


def _rgb_u8(color: str) -> list[int]:
    r, g, b, _a = to_u8_rgba(color)
    return [r, g, b]


class SettingsWindow:
    """Dear PyGui による設定ウィンドウ。"""

    def __init__(
        self,
        *,
        store: SettingsStore,
        on_toggle_run: Callable[[], bool] | None = None,
        on_export: Callable[[], None] | None = None,
        is_running: Callable[[], bool] | None = None,
        width: int = 360,
        height: int = 640,
        title: str = "Settings",
        auto_show: bool = True,
    ) -> None:
        self._store = store
        self._on_toggle_run = on_toggle_run
        self._on_export = on_export
        self._is_running = is_running
        self._title = title
        self._visible = False
        self._closing = False
        self._driver_started = False
        self._circle_count = -1

        dpg.create_context()
        dpg.create_viewport(title=title, width=width, height=height)
        dpg.setup_dearpygui()
        self._build()
        dpg.set_primary_window(ROOT_TAG, True)

        self._store_listener = self._on_store_change
        self._store.subscribe(self._store_listener)

        if auto_show:
            self.set_visible(True)

    # ---- 構築 ---------------------------------------------------------
    def _build(self) -> None:
        params = self._store.params()
        style = self._store.style()
        with dpg.window(tag=ROOT_TAG, label=self._title):
            with dpg.collapsing_header(label="Animation", default_open=True):
                dpg.add_slider_float(
                    tag=_TAGS["base_radius"],
                    label="Base Radius",
                    default_value=float(params.base_radius),
                    min_value=RADIUS_RANGE[0],
                    max_value=RADIUS_RANGE[1],
                    callback=lambda s, a, u: self._store.update_params(base_radius=a),
                )
                dpg.add_slider_float(
                    tag=_TAGS["speed_multiplier"],
                    label="Speed",
                    default_value=float(params.speed_multiplier),
                    min_value=SPEED_RANGE[0],
                    max_value=SPEED_RANGE[1],
                    callback=lambda s, a, u: self._store.update_params(speed_multiplier=a),
                )
                dpg.add_slider_float(
                    tag=_TAGS["frequency"],
                    label="Frequency",
                    default_value=float(params.frequency),
                    min_value=FREQUENCY_RANGE[0],
                    max_value=FREQUENCY_RANGE[1],
                    callback=lambda s, a, u: self._store.update_params(frequency=a),
                )
                dpg.add_input_int(
                    tag=_TAGS["harmonic_count"],
                    label="Circles",
                    default_value=int(params.harmonic_count),
                    min_value=HARMONICS_RANGE[0],
                    max_value=HARMONICS_RANGE[1],
                    min_clamped=True,
                    max_clamped=True,
                    callback=lambda s, a, u: self._store.update_params(harmonic_count=a),
                )
                dpg.add_combo(
                    tag=_TAGS["waveform"],
                    label="Waveform",
                    items=list(WAVEFORM_KINDS),
                    default_value=params.waveform.kind,
                    callback=lambda s, a, u: self._store.set_waveform(str(a)),
                )
                dpg.add_checkbox(
                    tag=_TAGS["show_circles"],
                    label="Show Circles",
                    default_value=bool(style.show_circles),
                    callback=lambda s, a, u: self._store.update_style(show_circles=bool(a)),
                )
                with dpg.group(horizontal=True):
                    dpg.add_button(
                        tag=RUN_BUTTON_TAG,
                        label=self._run_label(),
                        callback=lambda s, a, u: self._toggle_run(),
                    )
                    dpg.add_button(label="Export PNG", callback=lambda s, a, u: self._export())

            with dpg.collapsing_header(label="Colors", default_open=True):
                dpg.add_color_edit(
                    tag=_TAGS["line_color"],
                    label="Line",
                    default_value=_rgb_u8(style.line_color),
                    no_alpha=True,
                    callback=lambda s, a, u: self._on_color("line_color", a),
                )
                dpg.add_color_edit(
                    tag=_TAGS["wave_color"],
                    label="Wave",
                    default_value=_rgb_u8(style.wave_color),
                    no_alpha=True,
                    callback=lambda s, a, u: self._on_color("wave_color", a),
                )
                dpg.add_group(tag=CIRCLE_COLORS_TAG)
            self._rebuild_circle_colors()

            with dpg.collapsing_header(label="Custom Formula", default_open=False):
                dpg.add_input_text(
                    tag=FORMULA_INPUT_TAG,
                    hint="Enter a formula (e.g., sin(x) + 0.5*sin(3*x))",
                    default_value=self._store.formula,
                    callback=lambda s, a, u: self._store.set_formula(str(a)),
                )
                dpg.add_button(label="Apply Formula", callback=lambda s, a, u: self._apply_formula())
                dpg.add_text("", tag=FORMULA_ERROR_TAG, color=(248, 113, 113, 255))
                dpg.add_separator()
                dpg.add_text("Predefined Formulas")
                for preset in formula_presets(self._store.formula):
                    dpg.add_button(
                        label=preset.name,
                        user_data=preset.name,
                        callback=lambda s, a, u: self._apply_preset(str(u)),
                    )

    def _rebuild_circle_colors(self) -> None:
        style = self._store.style()
        count = len(style.circle_colors)
        if count == self._circle_count:
            for i, c in enumerate(style.circle_colors):
                dpg.set_value(f"__hmd_circle_color_{i}__", _rgb_u8(c))
            return
        dpg.delete_item(CIRCLE_COLORS_TAG, children_only=True)
        for i, c in enumerate(style.circle_colors):
            dpg.add_color_edit(
                parent=CIRCLE_COLORS_TAG,
                tag=f"__hmd_circle_color_{i}__",
                label=f"Circle {i + 1}",
                default_value=_rgb_u8(c),
                no_alpha=True,
                user_data=i,
                callback=lambda s, a, u: self._on_circle_color(int(u), a),
            )
        self._circle_count = count

    # ---- コールバック ---------------------------------------------------
    def _on_color(self, key: str, app_data: Any) -> None:
        try:
            color = to_hex_rgb(list(app_data)[:3])
        except (TypeError, ValueError):
            logger.exception("invalid color input: %s=%r", key, app_data)
            return
        self._store.update_style(**{key: color})

    def _on_circle_color(self, index: int, app_data: Any) -> None:
        try:
            color = to_hex_rgb(list(app_data)[:3])
        except (TypeError, ValueError):
            logger.exception("invalid circle color input: %d=%r", index, app_data)
            return
        self._store.set_circle_color(index, color)

    def _apply_formula(self) -> None:
        self._store.apply_formula(str(dpg.get_value(FORMULA_INPUT_TAG)))

    def _apply_preset(self, name: str) -> None:
        if name.lower() == "custom wave":
            self._apply_formula()
            return
        self._store.apply_preset(name)

    def _toggle_run(self) -> None:
        if self._on_toggle_run is not None:
            self._on_toggle_run()
        self.sync_run_state()

    def _export(self) -> None:
        if self._on_export is not None:
            self._on_export()

    def _run_label(self) -> str:
        running = bool(self._is_running()) if self._is_running is not None else False
        return "Pause" if running else "Play"

    def sync_run_state(self) -> None:
        """再生状態をボタン表示へ反映する（キーボード操作からも呼ぶ）。"""
        if self._closing:
            return
        dpg.configure_item(RUN_BUTTON_TAG, label=self._run_label())

    # ---- Store → UI ---------------------------------------------------
    def _on_store_change(self, kinds: Iterable[str]) -> None:
        if self._closing:
            return
        ks = set(kinds)
        try:
            if "params" in ks:
                p = self._store.params()
                dpg.set_value(_TAGS["base_radius"], float(p.base_radius))
                dpg.set_value(_TAGS["speed_multiplier"], float(p.speed_multiplier))
                dpg.set_value(_TAGS["frequency"], float(p.frequency))
                dpg.set_value(_TAGS["harmonic_count"], int(p.harmonic_count))
                dpg.set_value(_TAGS["waveform"], p.waveform.kind)
            if "style" in ks:
                st = self._store.style()
                dpg.set_value(_TAGS["show_circles"], bool(st.show_circles))
                dpg.set_value(_TAGS["line_color"], _rgb_u8(st.line_color))
                dpg.set_value(_TAGS["wave_color"], _rgb_u8(st.wave_color))
                self._rebuild_circle_colors()
            if "formula" in ks:
                dpg.set_value(FORMULA_INPUT_TAG, self._store.formula)
            if "formula_error" in ks:
                dpg.set_value(FORMULA_ERROR_TAG, self._store.formula_error or "")
        except Exception:
            logger.exception("settings window sync failed")

    # ---- 表示/終了 ------------------------------------------------------
    def set_visible(self, visible: bool) -> None:
        if visible and not self._visible:
            dpg.show_viewport()
            self._visible = True
            self._start_driver()
        elif not visible and self._visible:
            dpg.hide_viewport()
            self._visible = False
            self._stop_driver()

    def close(self) -> None:
        self._closing = True
        self._store.unsubscribe(self._store_listener)
        self._stop_driver()
        try:
            dpg.stop_dearpygui()
            dpg.destroy_context()
        except Exception:
            logger.exception("failed to destroy dearpygui context")

    # ---- internal: driver ---------------------------------------------
    def _tick(self, _dt: float) -> None:
        if self._closing:
            return
        if not dpg.is_dearpygui_running():
            # ビューポートが閉じられた
            self._closing = True
            self._stop_driver()
            return
        try:
            dpg.render_dearpygui_frame()
        except Exception:
            logger.exception("render_dearpygui_frame failed")

    def _start_driver(self) -> None:
        if self._driver_started:
            return
        pyglet.clock.schedule_interval(self._tick, 1.0 / 60.0)
        self._driver_started = True
        logger.debug("SettingsWindow: pyglet driver started")

    def _stop_driver(self) -> None:
        if not self._driver_started:
            return
        pyglet.clock.unschedule(self._tick)
        self._driver_started = False


__all__ = ["SettingsWindow"]
