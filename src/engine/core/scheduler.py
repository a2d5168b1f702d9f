"""
どこで: `engine.core.scheduler`
何を: 再生/一時停止の 2 状態を持つフレームスケジューラ。1 tick ごとに
      エピサイクル計算 → プリミティブ出力 → 履歴更新 → 角時間の前進 → 次 tick の予約 を行う。
なぜ: 「次フレームを再帰的に要求する」ループを、取り消し可能なハンドルを持つ明示的な状態機械に置き換え、
      実時計なしで（tick 源を差し替えて）停止/再開をテストできるようにするため。

状態遷移:
    PAUSED --start()--> RUNNING   （新しい tick を予約）
    RUNNING --stop()--> PAUSED    （予約中の tick を取り消す）
    RUNNING --teardown()--> PAUSED（描画面も切り離す）

不変条件:
- 同時に予約される tick は高々 1 つ。
- 角時間は減少しない。停止/再開で巻き戻しも飛ばしもしない。
- 描画面が無い状態の tick は no-op（再予約もしない）。描画面の再接続で予約を再開する。
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from common.formula import FormulaEvaluator
from common.params import ParameterSet, RenderStyle
from engine.render.scene import compose_frame
from engine.render.surface import dispatch
from engine.render.types import RenderSurface
from util.constants import DEFAULT_TIME_STEP

from .epicycle import StepResult, step
from .history import HistoryBuffer

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class SchedulerState(Enum):
    PAUSED = "paused"
    RUNNING = "running"


class TickHandle(Protocol):
    """予約済み tick の取り消しハンドル。"""

    def cancel(self) -> None: ...


class TickSource(Protocol):
    """次の表示リフレッシュで 1 回だけ callback(dt) を呼ぶ予約源。"""

    def schedule(self, callback: TickCallback) -> TickHandle: ...


class _Handle:
    """取り消しフラグ付きの汎用ハンドル。取り消し後に発火しても callback は呼ばれない。"""

    __slots__ = ("_callback", "_on_cancel", "cancelled")

    def __init__(self, callback: TickCallback, on_cancel: Callable[[], None] | None = None) -> None:
        self._callback = callback
        self._on_cancel = on_cancel
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    def fire(self, dt: float) -> None:
        if self.cancelled:
            return
        # 1 回限り
        self.cancelled = True
        self._callback(dt)


class ManualTickSource:
    """手動で発火させる tick 源（テスト/ヘッドレス用）。"""

    def __init__(self) -> None:
        self._pending: list[_Handle] = []

    def schedule(self, callback: TickCallback) -> TickHandle:
        handle = _Handle(callback)
        self._pending.append(handle)
        return handle

    @property
    def pending(self) -> int:
        """取り消されていない予約数。"""
        return sum(1 for h in self._pending if not h.cancelled)

    def fire(self, dt: float = 1.0 / 60.0) -> int:
        """現時点の予約をすべて発火させる。発火した数を返す。

        発火中に追加された予約は次回の `fire()` まで保留する。
        """
        due, self._pending = self._pending, []
        fired = 0
        for h in due:
            if h.cancelled:
                continue
            h.fire(dt)
            fired += 1
        return fired

    def run(self, frames: int, dt: float = 1.0 / 60.0) -> int:
        """`fire()` を最大 `frames` 回繰り返す。予約が尽きたら打ち切る。"""
        total = 0
        for _ in range(max(0, int(frames))):
            n = self.fire(dt)
            if n == 0:
                break
            total += n
        return total


class PygletTickSource:
    """`pyglet.clock.schedule_once` による tick 源（1/fps 秒後に 1 回）。"""

    def __init__(self, fps: int) -> None:
        self._interval = 1.0 / max(1, int(fps))

    def schedule(self, callback: TickCallback) -> TickHandle:
        import pyglet  # 遅延 import（ヘッドレス環境で core を読めるように）

        def _fire(dt: float) -> None:
            handle.fire(dt)

        def _unschedule() -> None:
            pyglet.clock.unschedule(_fire)

        handle = _Handle(callback, _unschedule)
        pyglet.clock.schedule_once(_fire, self._interval)
        return handle


class FrameScheduler:
    """エピサイクルのアニメーションを駆動する状態機械。

    Parameters
    ----------
    params : Callable[[], ParameterSet]
        現在の ParameterSet を返す関数（tick ごとに 1 回だけ読む）。
    style : Callable[[], RenderStyle]
        現在の描画スタイルを返す関数。
    tick_source : TickSource
        次 tick の予約源。
    evaluator : FormulaEvaluator | None
        custom 波形用の評価器（エラー状態は設定側へ通知される）。
    time_step : float
        角時間の基準増分（frequency·speed を掛けて前進する）。
    surface : RenderSurface | None
        描画面。None なら接続されるまで tick は no-op。
    """

    def __init__(
        self,
        params: Callable[[], ParameterSet],
        style: Callable[[], RenderStyle],
        *,
        tick_source: TickSource,
        evaluator: FormulaEvaluator | None = None,
        time_step: float = DEFAULT_TIME_STEP,
        surface: RenderSurface | None = None,
        history: HistoryBuffer | None = None,
    ) -> None:
        self._params = params
        self._style = style
        self._tick_source = tick_source
        self._evaluator = evaluator if evaluator is not None else FormulaEvaluator()
        self._time_step = max(0.0, float(time_step))
        self._surface: RenderSurface | None = surface
        self._history = history if history is not None else HistoryBuffer(
            surface.width if surface is not None else 1
        )
        self._state = SchedulerState.PAUSED
        self._handle: TickHandle | None = None
        self._angular_time = 0.0
        self._frames = 0
        self._last_result: StepResult | None = None

    # ---- 状態 ---------------------------------------------------------
    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def angular_time(self) -> float:
        return self._angular_time

    @property
    def history(self) -> HistoryBuffer:
        return self._history

    @property
    def evaluator(self) -> FormulaEvaluator:
        return self._evaluator

    @property
    def frames(self) -> int:
        """前進したフレーム数（静止再描画は含まない）。"""
        return self._frames

    @property
    def last_result(self) -> StepResult | None:
        return self._last_result

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    # ---- 描画面 -------------------------------------------------------
    @property
    def surface(self) -> RenderSurface | None:
        return self._surface

    def attach_surface(self, surface: RenderSurface) -> None:
        """描画面を接続する。再生中で予約が無ければ予約を再開する。"""
        self._surface = surface
        self._history.capacity = surface.width
        if self.is_running:
            self._schedule_next()
        else:
            self.render_static()

    def detach_surface(self) -> None:
        """描画面を切り離す（以降の tick は no-op）。"""
        self._surface = None

    def on_surface_resized(self) -> None:
        """描画面サイズの変更を反映する（履歴容量は幅に追従）。"""
        if self._surface is None:
            return
        self._history.capacity = self._surface.width
        if not self.is_running:
            self.render_static()

    # ---- 遷移 ---------------------------------------------------------
    def start(self) -> None:
        """PAUSED → RUNNING。常に新しい tick を予約する。"""
        if self.is_running:
            return
        self._state = SchedulerState.RUNNING
        logger.debug("scheduler: start at t=%.4f", self._angular_time)
        self._schedule_next()

    def stop(self) -> None:
        """RUNNING → PAUSED。予約中の tick を取り消す。"""
        if not self.is_running and self._handle is None:
            return
        self._state = SchedulerState.PAUSED
        self._cancel_pending()
        logger.debug("scheduler: stop at t=%.4f", self._angular_time)

    def toggle(self) -> bool:
        """再生/一時停止を切り替え、切り替え後に再生中なら True。"""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    def teardown(self) -> None:
        """停止して描画面を切り離す（アンマウント時）。"""
        self.stop()
        self.detach_surface()

    # ---- 設定変更 -----------------------------------------------------
    def on_settings_changed(self) -> None:
        """設定変更の通知。一時停止中は新しい設定で静止フレームを 1 枚描き直す。"""
        if not self.is_running:
            self.render_static()

    # ---- フレーム処理 -------------------------------------------------
    def render_static(self) -> bool:
        """角時間を進めず、履歴も変えずに現在の設定で 1 フレーム描く。"""
        surface = self._surface
        if surface is None:
            return False
        params = self._params()
        result = step(self._angular_time, params, evaluator=self._evaluator)
        self._last_result = result
        # 今フレームのサンプルを仮に先頭へ置いて描く（履歴には積まない）
        return self._emit(surface, result, self._with_sample(result.sample))

    def tick_once(self) -> bool:
        """1 フレーム分の処理（計算 → 描画 → 履歴 → 前進）。描画できなければ False。"""
        surface = self._surface
        if surface is None:
            logger.debug("scheduler: tick skipped (surface unavailable)")
            return False
        params = self._params()
        result = step(self._angular_time, params, evaluator=self._evaluator)
        self._last_result = result
        self._history.capacity = surface.width
        # 描画に成功したフレームだけ履歴へ積む
        if not self._emit(surface, result, self._with_sample(result.sample)):
            return False
        self._history.push(result.sample)
        self._angular_time += self._time_step * params.time_increment
        self._frames += 1
        return True

    def _with_sample(self, sample: float) -> list[float]:
        samples = self._history.as_array()
        return [sample, *samples[: max(0, self._history.capacity - 1)].tolist()]

    def _emit(self, surface: RenderSurface, result: StepResult, samples) -> bool:
        primitives = compose_frame(
            result,
            samples,
            width=surface.width,
            height=surface.height,
            style=self._style(),
        )
        try:
            dispatch(surface, primitives)
        except Exception:
            # 破棄済みの描画面など。以降は再接続まで no-op とする
            logger.exception("scheduler: surface failed; detaching")
            self._surface = None
            return False
        return True

    def _on_tick(self, _dt: float) -> None:
        self._handle = None
        if not self.is_running:
            return
        if not self.tick_once():
            return
        if self.is_running:
            self._schedule_next()

    def _schedule_next(self) -> None:
        if self._handle is not None or self._surface is None:
            return
        self._handle = self._tick_source.schedule(self._on_tick)

    def _cancel_pending(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()


__all__ = [
    "SchedulerState",
    "TickHandle",
    "TickSource",
    "ManualTickSource",
    "PygletTickSource",
    "FrameScheduler",
]
