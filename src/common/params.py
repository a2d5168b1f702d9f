"""
どこで: `common.params`
何を: 1 フレーム分の入力となる不変スナップショット `ParameterSet`、波形のタグ付きバリアント `Waveform`、
      描画スタイル `RenderStyle` を定義する。
なぜ: 設定変更を「値の丸ごと差し替え」に統一し、フレーム間の隠れた共有状態をなくすため。

補足:
- 不正値（harmonic_count < 1 や非正の実数）は生成時と `with_changes()` でクランプして受理する（例外にしない）。
- 数値化できない/非有限の入力は直前の値を維持する。
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal, Sequence, get_args

logger = logging.getLogger(__name__)

WaveformKind = Literal["sine", "square", "triangle", "sawtooth", "custom"]
WAVEFORM_KINDS: tuple[str, ...] = get_args(WaveformKind)

# 正の実数パラメータの下限（0 以下はここへ丸める）
MIN_POSITIVE = 1e-6
MIN_HARMONICS = 1

DEFAULT_FORMULA = "sin(x) + 0.5*sin(3*x)"
DEFAULT_COLOR = "#60a5fa"
DEFAULT_BACKGROUND = "#111827"


@dataclass(frozen=True)
class Waveform:
    """波形モード（タグ付きバリアント）。`custom` のみ数式を保持する。"""

    kind: WaveformKind = "sine"
    formula: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in WAVEFORM_KINDS:
            raise ValueError(f"unknown waveform kind: {self.kind!r}")
        if self.kind == "custom":
            object.__setattr__(self, "formula", self.formula or "")
        elif self.formula is not None:
            object.__setattr__(self, "formula", None)

    @classmethod
    def sine(cls) -> Waveform:
        return cls("sine")

    @classmethod
    def square(cls) -> Waveform:
        return cls("square")

    @classmethod
    def triangle(cls) -> Waveform:
        return cls("triangle")

    @classmethod
    def sawtooth(cls) -> Waveform:
        return cls("sawtooth")

    @classmethod
    def custom(cls, formula: str) -> Waveform:
        return cls("custom", formula)

    @classmethod
    def parse(cls, name: str | None, formula: str | None = None) -> Waveform:
        """モード名から生成する。未知の名前は sine にフォールバックする。"""
        key = (name or "sine").strip().lower()
        if key not in WAVEFORM_KINDS:
            logger.warning("unknown waveform mode %r; falling back to sine", name)
            return cls("sine")
        if key == "custom":
            return cls("custom", formula or "")
        return cls(key)  # type: ignore[arg-type]

    @property
    def is_custom(self) -> bool:
        return self.kind == "custom"


@dataclass(frozen=True)
class ParameterSet:
    """エピサイクル計算の入力パラメータ（不変）。"""

    base_radius: float = 100.0
    speed_multiplier: float = 1.0
    frequency: float = 12.0
    harmonic_count: int = 1
    waveform: Waveform = field(default_factory=Waveform)

    def __post_init__(self) -> None:
        # 直接生成でも with_changes と同じクランプ（数値化できない値はフィールド既定値）
        for f in fields(self):
            if f.name == "waveform":
                continue
            value = getattr(self, f.name)
            coerce = _coerce_count if f.name == "harmonic_count" else _coerce_positive
            fixed = coerce(value)
            if fixed is None:
                logger.debug("invalid %s=%r; using default %r", f.name, value, f.default)
                fixed = f.default
            object.__setattr__(self, f.name, fixed)

    @property
    def time_increment(self) -> float:
        """1 フレームあたりの角時間増分の係数（`time_step` を掛ける前）。"""
        return self.frequency * self.speed_multiplier

    def with_changes(self, **changes: Any) -> ParameterSet:
        """変更を検証・クランプして新しい ParameterSet を返す。

        - `harmonic_count` は整数化して 1 以上に丸める。
        - 実数パラメータは `MIN_POSITIVE` 以上に丸める。
        - 数値化できない/非有限な値は無視して直前値を維持する。
        - `waveform` には `Waveform` またはモード名（str）を渡せる。
        """
        accepted: dict[str, Any] = {}
        for name, value in changes.items():
            if name in ("base_radius", "speed_multiplier", "frequency"):
                v = _coerce_positive(value)
                if v is None:
                    logger.debug("ignored invalid %s=%r", name, value)
                    continue
                accepted[name] = v
            elif name == "harmonic_count":
                n = _coerce_count(value)
                if n is None:
                    logger.debug("ignored invalid harmonic_count=%r", value)
                    continue
                accepted[name] = n
            elif name == "waveform":
                if isinstance(value, Waveform):
                    accepted[name] = value
                else:
                    accepted[name] = Waveform.parse(str(value), self.waveform.formula)
            else:
                raise TypeError(f"unknown parameter: {name}")
        if not accepted:
            return self
        return replace(self, **accepted)

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> ParameterSet:
        """設定ファイル由来の辞書から生成する（未知キーは無視、値はクランプ）。"""
        base = cls()
        if not isinstance(data, dict):
            return base
        changes: dict[str, Any] = {}
        for key in ("base_radius", "speed_multiplier", "frequency", "harmonic_count"):
            if key in data:
                changes[key] = data[key]
        if "waveform" in data:
            changes["waveform"] = Waveform.parse(str(data["waveform"]), data.get("formula"))
        return base.with_changes(**changes)


@dataclass(frozen=True)
class RenderStyle:
    """描画スタイル（色・円の表示）。色は Hex 文字列で保持する。"""

    show_circles: bool = True
    circle_colors: tuple[str, ...] = (DEFAULT_COLOR,)
    line_color: str = DEFAULT_COLOR
    wave_color: str = DEFAULT_COLOR
    background: str = DEFAULT_BACKGROUND

    def circle_color(self, index: int) -> str:
        """i 番目の円の色（未定義なら先頭色）。"""
        if 0 <= index < len(self.circle_colors):
            return self.circle_colors[index]
        return self.circle_colors[0] if self.circle_colors else self.line_color

    def resized(self, count: int, *, rng: random.Random | None = None) -> RenderStyle:
        """円の色リストを `count` 個に揃える。不足分はランダム色で補う。"""
        count = max(MIN_HARMONICS, int(count))
        colors = list(self.circle_colors[:count])
        r = rng or random.Random()
        while len(colors) < count:
            colors.append(random_hex_color(r))
        if tuple(colors) == self.circle_colors:
            return self
        return replace(self, circle_colors=tuple(colors))

    def with_circle_color(self, index: int, color: str) -> RenderStyle:
        colors = list(self.circle_colors)
        if not 0 <= index < len(colors):
            raise IndexError(f"circle index out of range: {index}")
        colors[index] = color
        return replace(self, circle_colors=tuple(colors))


def random_hex_color(rng: random.Random) -> str:
    """`#RRGGBB` 形式のランダム色を返す。"""
    return f"#{rng.randrange(0x1000000):06x}"


def _coerce_positive(value: Any) -> float | None:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(v):
        return None
    return v if v >= MIN_POSITIVE else MIN_POSITIVE


def _coerce_count(value: Any) -> int | None:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(v):
        return None
    return max(MIN_HARMONICS, int(v))


def normalize_colors(colors: Sequence[str] | None) -> tuple[str, ...]:
    """色リストを tuple へ正規化する（空なら既定色 1 つ）。"""
    if not colors:
        return (DEFAULT_COLOR,)
    return tuple(str(c) for c in colors)


__all__ = [
    "WaveformKind",
    "WAVEFORM_KINDS",
    "Waveform",
    "ParameterSet",
    "RenderStyle",
    "DEFAULT_FORMULA",
    "DEFAULT_COLOR",
    "DEFAULT_BACKGROUND",
    "MIN_POSITIVE",
    "MIN_HARMONICS",
    "random_hex_color",
    "normalize_colors",
]
