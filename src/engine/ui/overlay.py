"""
どこで: `engine.ui` の HUD 表示モジュール。
何を: 再生状態・角時間・円の数・波形・数式エラーを pyglet の Label で重ねて描き、
      一時メッセージと説明パネル（About this visualization）を表示する。
なぜ: 描画ウィンドウだけで現在の状態と操作結果（PNG 保存など）を確認できるようにするため。
"""

from __future__ import annotations

import time
from typing import Callable, Literal

import pyglet
from pyglet.window import Window

from util.constants import INFO_TEXT

Level = Literal["info", "warn", "error"]

_LEVEL_COLORS: dict[str, tuple[int, int, int, int]] = {
    "info": (229, 231, 235, 220),
    "warn": (251, 191, 36, 230),
    "error": (248, 113, 113, 230),
}

KEY_HELP = "Space: play/pause  Up/Down: circles  1-5: waveform  C: circles  I: info  P: PNG  Esc: quit"


class OverlayHUD:
    """状態行（status_provider の key/value）とメッセージを pyglet Label で描画する。

    `status_provider` は tick ごとに呼ばれ、表示したい行を順序付き dict で返す。
    """

    def __init__(
        self,
        window: Window,
        status_provider: Callable[[], dict[str, str]],
        *,
        font_size: int = 9,
        color: tuple[int, int, int, int] = (156, 163, 175, 200),
    ) -> None:
        self.window = window
        self._status_provider = status_provider
        self._labels: dict[str, pyglet.text.Label] = {}
        self._color = color
        self.font_size = font_size
        self._messages: list[tuple[str, float, Level]] = []
        self._show_info = False
        self._info_label: pyglet.text.Label | None = None

    # -------- pyglet clock --------
    def tick(self, dt: float) -> None:
        rows = self._status_provider()
        y = 10
        for key, txt in rows.items():
            lab = self._labels.get(key)
            if lab is None:
                lab = pyglet.text.Label(
                    text="",
                    x=10,
                    y=y,
                    anchor_x="left",
                    anchor_y="bottom",
                    font_size=self.font_size,
                    color=self._color,
                )
                self._labels[key] = lab
            lab.y = y
            lab.text = f"{key} : {txt}"
            y += 16
        # 消えた行
        for key in [k for k in self._labels if k not in rows]:
            del self._labels[key]
        now = time.monotonic()
        self._messages = [m for m in self._messages if m[1] > now]

    # -------- draw --------
    def draw(self) -> None:
        for lab in self._labels.values():
            lab.draw()
        y = self.window.height - 12
        for text, _expire, level in self._messages:
            pyglet.text.Label(
                text=text,
                x=10,
                y=y,
                anchor_x="left",
                anchor_y="top",
                font_size=self.font_size + 2,
                color=_LEVEL_COLORS[level],
            ).draw()
            y -= 20
        if self._show_info:
            self._info().draw()

    def _info(self) -> pyglet.text.Label:
        width = max(200, min(520, self.window.width - 20))
        lab = self._info_label
        if lab is None or lab.width != width:
            lab = pyglet.text.Label(
                text=f"About this visualization\n\n{INFO_TEXT}\n\n{KEY_HELP}",
                x=self.window.width - 10,
                y=self.window.height - 12,
                anchor_x="right",
                anchor_y="top",
                width=width,
                multiline=True,
                font_size=self.font_size + 1,
                color=_LEVEL_COLORS["info"],
            )
            self._info_label = lab
        lab.x = self.window.width - 10
        lab.y = self.window.height - 12
        return lab

    # ---- public helpers ----
    @property
    def info_visible(self) -> bool:
        return self._show_info

    def toggle_info(self) -> bool:
        self._show_info = not self._show_info
        return self._show_info

    def show_message(self, text: str, level: Level = "info", timeout_sec: float = 3) -> None:
        expire = time.monotonic() + max(0.1, float(timeout_sec))
        self._messages.append((text, expire, level))
