"""共通フィクスチャ。

- 乱数シード固定
- 既定パラメータ/スタイル
- 手動 tick 源と記録用描画面で組んだスケジューラ
"""

from __future__ import annotations

import random
from typing import Iterator

import numpy as np
import pytest

from common.formula import FormulaEvaluator
from common.params import ParameterSet, RenderStyle
from engine.core.scheduler import FrameScheduler, ManualTickSource
from engine.render.surface import RecordingSurface
from engine.ui.settings import SettingsStore


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture()
def params() -> ParameterSet:
    return ParameterSet()


@pytest.fixture()
def style() -> RenderStyle:
    return RenderStyle()


@pytest.fixture()
def store(rng: random.Random) -> SettingsStore:
    return SettingsStore(rng=rng)


@pytest.fixture()
def tick_source() -> ManualTickSource:
    return ManualTickSource()


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface(800, 400)


@pytest.fixture()
def scheduler(
    store: SettingsStore, tick_source: ManualTickSource, surface: RecordingSurface
) -> FrameScheduler:
    """SettingsStore に結線済みのスケジューラ（一時停止状態）。"""
    evaluator = FormulaEvaluator(listener=store.set_formula_error)
    sch = FrameScheduler(
        store.params,
        store.style,
        tick_source=tick_source,
        evaluator=evaluator,
        time_step=0.01,
        surface=surface,
    )
    def _on_change(kinds: list[str]) -> None:
        if "params" in kinds or "style" in kinds:
            sch.on_settings_changed()

    store.subscribe(_on_change)
    return sch


@pytest.fixture()
def hmd_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """`HMD_*` 環境変数を変更し、終了時に設定を読み直す。"""
    from common import settings

    yield monkeypatch
    monkeypatch.undo()
    settings.reload_from_env()
