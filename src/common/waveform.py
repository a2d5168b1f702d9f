"""
どこで: `common.waveform`
何を: 高調波番号 n と角時間 t から、選択中の波形モードでの符号付き振幅を返す純粋ロジック。
なぜ: エピサイクルの y 成分を任意の周期波形に差し替え、円の連鎖を波形シンセとして使うため。

設計方針:
- 純粋・決定的（custom のみ数式評価器の状態を更新する）。
- 波形: sine/square/triangle/sawtooth/custom。
- 範囲: 組み込み 4 波形は [-1, 1]。custom は数式の値そのまま（失敗時は 0）。
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from .formula import FormulaEvaluator
from .params import Waveform

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


def sine(n: int, t: float) -> float:
    """sin(n·t)。"""
    return math.sin(n * t)


def square(n: int, t: float) -> float:
    """sign(sin(n·t))。sin が 0 のときは 0。"""
    s = math.sin(n * t)
    if s > 0.0:
        return 1.0
    if s < 0.0:
        return -1.0
    return 0.0


def triangle(n: int, t: float) -> float:
    """(2/π)·asin(sin(n·t))。"""
    # 丸め誤差で |sin| が 1 をわずかに超えても asin が落ちないように clamp
    s = max(-1.0, min(1.0, math.sin(n * t)))
    return (2.0 / math.pi) * math.asin(s)


def sawtooth(n: int, t: float) -> float:
    """2·(u − floor(0.5 + u))、u = n·t/(2π)。周期 2π/n のランプ（-1..1）。"""
    u = n * t / _TWO_PI
    return 2.0 * (u - math.floor(0.5 + u))


_GENERATORS: dict[str, Callable[[int, float], float]] = {
    "sine": sine,
    "square": square,
    "triangle": triangle,
    "sawtooth": sawtooth,
}


def amplitude(
    n: int,
    t: float,
    waveform: Waveform | str,
    *,
    evaluator: FormulaEvaluator | None = None,
) -> float:
    """高調波 `n`・角時間 `t` における振幅を返す。

    Parameters
    ----------
    n : int
        高調波番号（奇数 2i+1）。
    t : float
        角時間。
    waveform : Waveform | str
        波形バリアント。文字列を渡した場合は組み込み波形名として扱い、未知なら sine。
    evaluator : FormulaEvaluator | None
        custom 用の評価器。None の場合は一時的な評価器を使う（エラー状態は捨てられる）。
    """
    if isinstance(waveform, Waveform):
        kind = waveform.kind
        formula = waveform.formula
    else:
        kind = str(waveform)
        formula = None

    if kind == "custom":
        ev = evaluator if evaluator is not None else FormulaEvaluator()
        return ev.sample(formula or "", n * t)

    gen = _GENERATORS.get(kind)
    if gen is None:
        _warn_unknown(kind)
        return sine(n, t)
    return gen(n, t)


_warned: set[str] = set()


def _warn_unknown(kind: str) -> None:
    if kind in _warned:
        return
    _warned.add(kind)
    logger.warning("unknown waveform mode %r; using sine", kind)


__all__ = ["sine", "square", "triangle", "sawtooth", "amplitude"]
