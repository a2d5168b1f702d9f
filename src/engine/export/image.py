"""
どこで: `engine.export.image`。
何を: 現在の描画ウィンドウ内容を PNG として保存するラッパ。
なぜ: ワンアクション（P キー/設定ウィンドウのボタン）で波形のスクリーンショットを得られるようにするため。

保存されるのはウィンドウバッファそのもの（HUD を含む見た目どおり）。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pyglet

from util.constants import PNG_NAME_PREFIX
from util.paths import ensure_screenshots_dir


def default_png_path(width: int, height: int, *, name_prefix: str = PNG_NAME_PREFIX) -> Path:
    """`data/screenshot/<prefix>_<timestamp>_<w>x<h>.png`（重複時は連番）を返す。"""
    out_dir = ensure_screenshots_dir()
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return _unique_path(out_dir / f"{name_prefix}_{ts}_{int(width)}x{int(height)}.png")


def save_png(
    window: "pyglet.window.Window",
    path: Path | None = None,
    *,
    name_prefix: str = PNG_NAME_PREFIX,
) -> Path:
    """現在のウィンドウ内容を PNG として保存する。

    Parameters
    ----------
    window : pyglet.window.Window
        対象ウィンドウ。
    path : Path | None
        出力先パス。None の場合は `data/screenshot/` にタイムスタンプ名で保存。
    name_prefix : str
        既定ファイル名の接頭辞。

    Returns
    -------
    Path
        保存先のファイルパス。
    """
    if path is None:
        path = default_png_path(window.width, window.height, name_prefix=name_prefix)
    try:
        buffer = pyglet.image.get_buffer_manager().get_color_buffer()
        buffer.save(str(path))
    except Exception as e:  # pyglet が未初期化/ヘッドレスなど
        raise RuntimeError(f"failed to save PNG: {e}") from e
    return path


def _unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    parent = path.parent
    i = 1
    while True:
        cand = parent / f"{stem}-{i}{suffix}"
        if not cand.exists():
            return cand
        i += 1
