"""
どこで: `util.color`。
何を: 色指定（Hex 文字列 / RGBA 0–1 / RGBA 0–255）の相互変換。
なぜ: 設定は Hex 文字列で保持し、pyglet（0–255）と Dear PyGui（0–1 または 0–255）へ同じ規則で変換するため。
"""

from __future__ import annotations

from typing import Sequence

RGBA01 = tuple[float, float, float, float]


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x)


def _clamp_u8(x: float) -> int:
    return max(0, min(255, int(round(x))))


def parse_hex_color_str(s: str) -> RGBA01:
    """Hex 文字列から RGBA(0–1) を返す。

    受理形式: "#RRGGBB", "#RRGGBBAA", "0xRRGGBB", "RRGGBB" など（大文字/小文字は不問）。
    """
    t = s.strip()
    if t.startswith("#"):
        t = t[1:]
    elif t.lower().startswith("0x"):
        t = t[2:]
    if len(t) not in (6, 8):
        raise ValueError(f"invalid hex color length: '{s}' (expected RRGGBB or RRGGBBAA)")
    try:
        channels = [int(t[i : i + 2], 16) for i in range(0, len(t), 2)]
    except ValueError as e:
        raise ValueError(f"invalid hex color: '{s}'") from e
    if len(channels) == 3:
        channels.append(255)
    r, g, b, a = channels
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def normalize_color(value: object) -> RGBA01:
    """色を RGBA(0–1) へ正規化する。

    - Hex 文字列
    - (r, g, b[, a]) で全成分が 0..1 なら 0–1 とみなす
    - それ以外の数値列は 0–255 とみなして丸める（Dear PyGui のカラー入力はこちらになることがある）
    """
    if isinstance(value, str):
        return parse_hex_color_str(value)
    if not isinstance(value, (list, tuple)) or len(value) not in (3, 4):
        raise ValueError(f"unsupported color value: {value!r}")
    seq: Sequence[float | int] = value
    try:
        comps = [float(c) for c in seq]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color tuple/list: {value!r}") from e
    if len(comps) == 3:
        comps.append(1.0 if all(0.0 <= c <= 1.0 for c in comps) else 255.0)
    if all(0.0 <= c <= 1.0 for c in comps):
        r, g, b, a = comps
        return (_clamp01(r), _clamp01(g), _clamp01(b), _clamp01(a))
    r8, g8, b8, a8 = (_clamp_u8(c) for c in comps)
    return (r8 / 255.0, g8 / 255.0, b8 / 255.0, a8 / 255.0)


def to_u8_rgba(value: object) -> tuple[int, int, int, int]:
    """色を RGBA(0–255) へ変換する。"""
    r, g, b, a = normalize_color(value)
    return (_clamp_u8(r * 255), _clamp_u8(g * 255), _clamp_u8(b * 255), _clamp_u8(a * 255))


def to_hex_rgb(value: object) -> str:
    """色を `#rrggbb` 形式へ変換する（アルファは捨てる）。"""
    r, g, b, _a = to_u8_rgba(value)
    return f"#{r:02x}{g:02x}{b:02x}"


__all__ = [
    "parse_hex_color_str",
    "normalize_color",
    "to_u8_rgba",
    "to_hex_rgb",
]
