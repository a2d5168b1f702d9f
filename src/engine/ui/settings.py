"""
どこで: `engine.ui.settings` の状態管理層。
何を: 現在の ParameterSet / RenderStyle / 数式入力 / 数式エラーを保持する SettingsStore。
      変更は不変スナップショットの差し替えで行い、購読者へ通知する。
なぜ: 設定ウィンドウ・キーボード操作・スケジューラが共有する単一の真実源とするため。

補足:
- 円の数を増やすと不足分の円色をランダムに補う（減らすと末尾を捨てる）。
- 数式テキストは custom 波形が選ばれているときだけ描画に反映される。
- スケジューラは `params()`/`style()` を tick ごとに 1 回だけ読む（フレーム途中で値は変わらない）。
"""

from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Any, Callable, Iterable, Literal

from common.formula import DEFAULT_ERROR_MESSAGE, InvalidFormula, compile_formula
from common.params import DEFAULT_FORMULA, ParameterSet, RenderStyle, Waveform
from common.presets import find_preset

logger = logging.getLogger(__name__)

ChangeKind = Literal["params", "style", "formula", "formula_error"]
Subscriber = Callable[[list[str]], None]


class SettingsStore:
    """設定の集中管理。`subscribe()` した関数に変更種別のリストを通知する。"""

    def __init__(
        self,
        params: ParameterSet | None = None,
        style: RenderStyle | None = None,
        *,
        formula: str = DEFAULT_FORMULA,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = RLock()
        self._rng = rng or random.Random()
        p = params or ParameterSet()
        self._params = p
        self._style = (style or RenderStyle()).resized(p.harmonic_count, rng=self._rng)
        self._formula = p.waveform.formula if p.waveform.is_custom else str(formula)
        self._formula_error: str | None = None
        self._listeners: list[Subscriber] = []

    # ---- スナップショット ----------------------------------------------
    def params(self) -> ParameterSet:
        with self._lock:
            return self._params

    def style(self) -> RenderStyle:
        with self._lock:
            return self._style

    @property
    def formula(self) -> str:
        with self._lock:
            return self._formula

    @property
    def formula_error(self) -> str | None:
        with self._lock:
            return self._formula_error

    # ---- 更新 ---------------------------------------------------------
    def update_params(self, **changes: Any) -> ParameterSet:
        """パラメータを更新する（検証/クランプは ParameterSet 側）。

        `waveform="custom"` のように名前で渡した場合、custom は現在の数式テキストを使う。
        """
        kinds: list[str] = []
        with self._lock:
            if "waveform" in changes and not isinstance(changes["waveform"], Waveform):
                changes["waveform"] = Waveform.parse(str(changes["waveform"]), self._formula)
            new = self._params.with_changes(**changes)
            if new != self._params:
                self._params = new
                kinds.append("params")
                resized = self._style.resized(new.harmonic_count, rng=self._rng)
                if resized is not self._style:
                    self._style = resized
                    kinds.append("style")
            result = self._params
        self._notify(kinds)
        return result

    def set_waveform(self, name: str) -> ParameterSet:
        return self.update_params(waveform=name)

    def update_style(
        self,
        *,
        show_circles: bool | None = None,
        line_color: str | None = None,
        wave_color: str | None = None,
        background: str | None = None,
    ) -> RenderStyle:
        changes: dict[str, Any] = {}
        if show_circles is not None:
            changes["show_circles"] = bool(show_circles)
        if line_color is not None:
            changes["line_color"] = str(line_color)
        if wave_color is not None:
            changes["wave_color"] = str(wave_color)
        if background is not None:
            changes["background"] = str(background)
        with self._lock:
            current = self._style
            new = RenderStyle(
                show_circles=changes.get("show_circles", current.show_circles),
                circle_colors=current.circle_colors,
                line_color=changes.get("line_color", current.line_color),
                wave_color=changes.get("wave_color", current.wave_color),
                background=changes.get("background", current.background),
            )
            changed = new != current
            if changed:
                self._style = new
            result = self._style
        if changed:
            self._notify(["style"])
        return result

    def set_circle_color(self, index: int, color: str) -> RenderStyle:
        with self._lock:
            new = self._style.with_circle_color(int(index), str(color))
            changed = new != self._style
            self._style = new
        if changed:
            self._notify(["style"])
        return new

    def set_formula(self, text: str) -> None:
        """数式テキストを更新する。custom 選択中なら描画にも即反映する。"""
        text = str(text)
        kinds: list[str] = []
        with self._lock:
            if text != self._formula:
                self._formula = text
                kinds.append("formula")
                if self._params.waveform.is_custom:
                    self._params = self._params.with_changes(waveform=Waveform.custom(text))
                    kinds.append("params")
        self._notify(kinds)

    def apply_formula(self, text: str | None = None) -> str | None:
        """数式を適用して custom 波形へ切り替える。

        構文チェックを先に行い、結果のエラーメッセージ（正常なら None）を返す。
        不正な数式でも適用自体は行い、描画側はサンプル 0 で継続する。
        """
        if text is not None:
            self.set_formula(text)
        formula = self.formula
        error: str | None = None
        try:
            compile_formula(formula)
        except InvalidFormula as e:
            logger.info("applied formula is invalid: %s", e.reason)
            error = DEFAULT_ERROR_MESSAGE
        self.set_formula_error(error)
        self.update_params(waveform=Waveform.custom(formula))
        return error

    def apply_preset(self, name: str) -> str | None:
        """名前で数式プリセットを適用する（未知の名前は KeyError）。"""
        preset = find_preset(name, self.formula)
        return self.apply_formula(preset.formula)

    def set_formula_error(self, message: str | None) -> None:
        """数式エラー表示を更新する（FormulaEvaluator の listener としても使う）。"""
        with self._lock:
            if message == self._formula_error:
                return
            self._formula_error = message
        self._notify(["formula_error"])

    # ---- 購読 ---------------------------------------------------------
    def subscribe(self, listener: Subscriber) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Subscriber) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self, kinds: Iterable[str]) -> None:
        ks = list(kinds)
        if not ks:
            return
        for listener in list(self._listeners):
            try:
                listener(ks)
            except Exception:
                logger.exception("settings listener failed")


__all__ = ["SettingsStore", "ChangeKind"]
