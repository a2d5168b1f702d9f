"""
どこで: `api.sketch`（実行ランナー）。
何を: エピサイクル（フーリエ級数）による波形合成のアニメーションを pyglet ウィンドウで実行し、
      Dear PyGui の設定ウィンドウ・HUD・キーボード操作・PNG 書き出しを統合する。
なぜ: 1 回の呼び出しで対話的な可視化を起動できるようにするため（GUI は任意で無効化可能）。

主エントリポイント:
- `run(*, canvas_size=None, fps=None, params=None, style=None, ..., init_only=False)`

実行フロー（概要）:
1) 設定解決: 明示引数 > 環境変数（`HMD_*`）> `configs/default.yaml`/`config.yaml` > 組み込み既定値。
2) セッション構築: `SettingsStore`（単一の真実源）、`FormulaEvaluator`（エラーは Store へ通知）、
   `FrameScheduler`（再生/一時停止の状態機械）を生成し、設定変更の購読で結線する。
3) `init_only=True`: pyglet/Dear PyGui を読み込まず、記録用の描画面と手動 tick 源で構築して返す。
4) ウィンドウ: `RenderWindow` + `PygletSurface` を生成し、スケジューラへ描画面を接続。
   tick は `pyglet.clock.schedule_once` で 1 回ずつ予約する（停止時は取り消す）。
5) HUD/設定ウィンドウ: どちらも pyglet clock の `schedule_interval` で駆動。
6) キー操作:
   Space 再生/一時停止, Up/Down 円の数, 1–5 波形, C 円の表示, I 説明パネル, P PNG 保存, Esc 終了。

例:
    from api import run
    from common.params import ParameterSet

    run(params=ParameterSet(harmonic_count=5, frequency=8))

注意/制限:
- ヘッドレス環境では pyglet の初期化に失敗する場合がある（`init_only=True` を使う）。
"""

from __future__ import annotations

import logging

from common.formula import FormulaEvaluator
from common.logging import setup_default_logging
from common.params import ParameterSet, RenderStyle
from common.settings import get as _get_settings
from engine.core.scheduler import FrameScheduler, ManualTickSource
from engine.render.surface import RecordingSurface
from engine.ui.settings import SettingsStore
from util.color import normalize_color

from .sketch_runner.actions import SketchSession, apply_action
from .sketch_runner.utils import (
    resolve_autostart,
    resolve_canvas_size,
    resolve_fps,
    resolve_initial_settings,
    resolve_time_step,
)

logger = logging.getLogger(__name__)


def run(
    *,
    canvas_size: tuple[int, int] | None = None,
    fps: int | None = None,
    time_step: float | None = None,
    params: ParameterSet | None = None,
    style: RenderStyle | None = None,
    autostart: bool | None = None,
    use_settings_gui: bool | None = None,
    show_hud: bool | None = None,
    init_only: bool = False,
) -> SketchSession | None:
    """波形合成のアニメーションを実行する。

    Parameters
    ----------
    canvas_size : tuple[int, int] | None
        描画ウィンドウの `(width, height)` [px]。None で設定ファイル/既定（1200x400）。
    fps : int | None
        tick の予約間隔（1/fps 秒）。None で環境変数/設定ファイルから解決。
    time_step : float | None
        1 フレームあたりの角時間の基準増分（frequency·speed を掛ける）。
    params : ParameterSet | None
        初期パラメータ。None で設定ファイル `defaults` から。
    style : RenderStyle | None
        初期の描画スタイル。None で設定ファイル `defaults`/`canvas` から。
    autostart : bool | None
        True で起動直後から再生。None で設定ファイル（既定 True）。
    use_settings_gui : bool | None
        Dear PyGui の設定ウィンドウを開くか。None で `HMD_SETTINGS_GUI`。
    show_hud : bool | None
        HUD の有効/無効。None で `HMD_HUD_ENABLED`。
    init_only : bool, default False
        True でウィンドウを作らずにセッションを構築して返す（手動 tick 源 + 記録用描画面）。

    Returns
    -------
    SketchSession | None
        `init_only=True` のときのみ構築したセッション。通常実行はウィンドウが閉じるまで戻らず None。
    """
    setup_default_logging()
    settings = _get_settings()

    fps = resolve_fps(fps)
    time_step = resolve_time_step(time_step)
    width, height = resolve_canvas_size(canvas_size)
    params, style, formula = resolve_initial_settings(params, style)
    autostart = resolve_autostart(autostart)
    gui_enabled = settings.SETTINGS_GUI if use_settings_gui is None else bool(use_settings_gui)
    hud_enabled = settings.HUD_ENABLED if show_hud is None else bool(show_hud)

    store = SettingsStore(params, style, formula=formula)
    evaluator = FormulaEvaluator(listener=store.set_formula_error)

    if init_only:
        # 重い依存を読み込まずに早期リターン
        scheduler = FrameScheduler(
            store.params,
            store.style,
            tick_source=ManualTickSource(),
            evaluator=evaluator,
            time_step=time_step,
            surface=RecordingSurface(width, height),
        )
        session = SketchSession(store=store, scheduler=scheduler, evaluator=evaluator)
        session.wire()
        if autostart:
            scheduler.start()
        return session

    # 遅延インポート（ヘッドレス環境でのウィンドウ生成を避ける）
    import pyglet
    from pyglet.window import key

    from engine.core.render_window import RenderWindow
    from engine.core.scheduler import PygletTickSource
    from engine.export.image import save_png
    from engine.render.pyglet_surface import PygletSurface

    window = RenderWindow(width, height, bg_color=normalize_color(store.style().background))
    surface = PygletSurface(window, on_background=window.set_background_color)
    scheduler = FrameScheduler(
        store.params,
        store.style,
        tick_source=PygletTickSource(fps),
        evaluator=evaluator,
        time_step=time_step,
    )
    session = SketchSession(store=store, scheduler=scheduler, evaluator=evaluator)
    session.wire()
    window.add_draw_callback(surface.draw)
    window.add_resize_callback(lambda _w, _h: scheduler.on_surface_resized())

    # ---- HUD ---------------------------------------------------------
    overlay = None
    if hud_enabled:
        from engine.ui.overlay import OverlayHUD

        def _status() -> dict[str, str]:
            p = store.params()
            rows = {
                "STATE": "PLAY" if scheduler.is_running else "PAUSE",
                "T": f"{scheduler.angular_time:.2f}",
                "CIRCLES": str(p.harmonic_count),
                "WAVE": p.waveform.kind,
            }
            if p.waveform.is_custom and store.formula_error:
                rows["FORMULA"] = store.formula_error
            return rows

        overlay = OverlayHUD(window, _status)
        window.add_draw_callback(overlay.draw)

    def _notify(text: str, level: str = "info") -> None:
        if overlay is not None:
            overlay.show_message(text, level=level)  # type: ignore[arg-type]

    # ---- PNG 書き出し ---------------------------------------------------
    def _export_png() -> None:
        try:
            p = save_png(window)
        except RuntimeError as e:
            logger.error("PNG export failed: %s", e)
            _notify(f"PNG export failed: {e}", "error")
            return
        logger.info("saved PNG: %s", p)
        _notify(f"Saved PNG: {p}")

    # ---- 設定ウィンドウ --------------------------------------------------
    settings_window = None
    if gui_enabled:
        try:
            from engine.ui.settings_window import SettingsWindow

            settings_window = SettingsWindow(
                store=store,
                on_toggle_run=scheduler.toggle,
                on_export=_export_png,
                is_running=lambda: scheduler.is_running,
            )
        except Exception:
            # GUI が使えない環境でもアニメーションは続行
            logger.exception("settings window unavailable; continuing without it")
            settings_window = None

    # ---- HUD 更新 --------------------------------------------------------
    if overlay is not None:
        pyglet.clock.schedule_interval(overlay.tick, 1 / fps)

    scheduler.attach_surface(surface)
    if autostart:
        scheduler.start()

    # ---- pyglet イベント ---------------------------------------------------
    key_actions = {
        key.SPACE: "toggle_run",
        key.UP: "more_circles",
        key.DOWN: "fewer_circles",
        key.C: "toggle_circles",
        key._1: "waveform_1",
        key._2: "waveform_2",
        key._3: "waveform_3",
        key._4: "waveform_4",
        key._5: "waveform_5",
    }

    @window.event
    def on_key_press(sym, mods):  # noqa: ANN001
        if sym == key.ESCAPE:
            window.close()
            return pyglet.event.EVENT_HANDLED
        if sym == key.P:
            _export_png()
            return pyglet.event.EVENT_HANDLED
        if sym == key.I:
            if overlay is not None:
                overlay.toggle_info()
            return pyglet.event.EVENT_HANDLED
        action = key_actions.get(sym)
        if action is None:
            return None
        message = apply_action(session, action)
        _notify(message)
        if settings_window is not None and action == "toggle_run":
            settings_window.sync_run_state()
        return pyglet.event.EVENT_HANDLED

    @window.event
    def on_close():  # noqa: ANN001
        # 冪等なクリーンアップ
        if getattr(on_close, "_closed", False):
            return
        scheduler.teardown()
        session.unwire()
        surface.close()
        if overlay is not None:
            pyglet.clock.unschedule(overlay.tick)
        if settings_window is not None:
            settings_window.close()
        setattr(on_close, "_closed", True)
        pyglet.app.exit()

    pyglet.app.run()
    return None


__all__ = ["run"]
