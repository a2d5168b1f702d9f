"""
どこで: `api.sketch_runner.actions`。
何を: 描画セッション（SettingsStore + FrameScheduler の組）と、キーボード操作に対応するアクション。
なぜ: pyglet のキーシンボルから切り離した名前付きアクションとして実装し、ウィンドウ無しでテストできるようにするため。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from common.formula import FormulaEvaluator
from common.params import WAVEFORM_KINDS
from engine.core.scheduler import FrameScheduler
from engine.ui.settings import SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class SketchSession:
    """1 つの描画セッションを構成するオブジェクト群。"""

    store: SettingsStore
    scheduler: FrameScheduler
    evaluator: FormulaEvaluator

    def wire(self) -> None:
        """設定変更をスケジューラへ届ける購読を登録する。"""
        self.store.subscribe(self._on_settings_changed)

    def unwire(self) -> None:
        self.store.unsubscribe(self._on_settings_changed)

    def _on_settings_changed(self, kinds: list[str]) -> None:
        if "params" in kinds or "style" in kinds:
            self.scheduler.on_settings_changed()


# 数字キー 1..5 に割り当てる波形（WAVEFORM_KINDS の順）
WAVEFORM_SHORTCUTS: dict[str, str] = {str(i + 1): k for i, k in enumerate(WAVEFORM_KINDS)}

ACTIONS = (
    "toggle_run",
    "more_circles",
    "fewer_circles",
    "toggle_circles",
    *(f"waveform_{k}" for k in WAVEFORM_SHORTCUTS),
)


def apply_action(session: SketchSession, action: str) -> str:
    """名前付きアクションを実行し、HUD に出す短い説明を返す。未知の名前は ValueError。"""
    store = session.store
    if action == "toggle_run":
        running = session.scheduler.toggle()
        return "Playing" if running else "Paused"
    if action == "more_circles":
        p = store.update_params(harmonic_count=store.params().harmonic_count + 1)
        return f"Circles: {p.harmonic_count}"
    if action == "fewer_circles":
        p = store.update_params(harmonic_count=store.params().harmonic_count - 1)
        return f"Circles: {p.harmonic_count}"
    if action == "toggle_circles":
        st = store.update_style(show_circles=not store.style().show_circles)
        return "Circles shown" if st.show_circles else "Circles hidden"
    if action.startswith("waveform_"):
        kind = WAVEFORM_SHORTCUTS.get(action[len("waveform_") :])
        if kind is not None:
            p = store.set_waveform(kind)
            return f"Waveform: {p.waveform.kind}"
    raise ValueError(f"unknown action: {action!r}")


__all__ = ["SketchSession", "ACTIONS", "WAVEFORM_SHORTCUTS", "apply_action"]
