"""
どこで: `common.formula`
何を: ユーザ入力の 1 変数数式文字列（x の関数）を sympy で解釈・コンパイルし、数値評価する。
なぜ: custom 波形でユーザ定義の周期関数を使うため。失敗はフレームを止めず 0 に置き換える。

設計方針:
- 構文は mathjs 互換寄り（`^` はべき乗、`pi`/`e` は定数）。
- コンパイル結果（失敗も含む）は LRU で保持し、毎フレームの再パースを避ける。
- 評価失敗（構文/未知シンボル/定義域/ゼロ除算/非有限値/複素数）は `InvalidFormula`。
- 解析は評価なし（`evaluate=False`）で行い、数値リテラルを浮動小数へ置き換えてからコンパイルする。
  `9^9^9` のような整数べき乗の塔を厳密整数で計算し続けないため（溢れは評価時に OverflowError）。
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from typing import Callable, Union

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Invalid formula. Please check your input."

_X = sp.Symbol("x", real=True)
_LOCALS: dict[str, object] = {
    "x": _X,
    "pi": sp.pi,
    "e": sp.E,
    "E": sp.E,
    "ln": sp.log,
    "abs": sp.Abs,
    "ceil": sp.ceiling,
}
_TRANSFORMS = standard_transformations + (convert_xor,)

# `math` へ変換できる関数だけを受け付ける（sqrt はべき乗になる）
_ALLOWED_FUNCTIONS: frozenset[type] = frozenset(
    {
        sp.sin,
        sp.cos,
        sp.tan,
        sp.asin,
        sp.acos,
        sp.atan,
        sp.sinh,
        sp.cosh,
        sp.tanh,
        sp.exp,
        sp.log,
        sp.Abs,
        sp.floor,
        sp.ceiling,
        sp.sign,
    }
)

CompiledFormula = Callable[[float], float]
ErrorListener = Callable[[Union[str, None]], None]

_MAX_LOGGED = 256


class InvalidFormula(ValueError):
    """数式の解釈/評価に失敗したことを表す。"""

    def __init__(self, formula: str, reason: str) -> None:
        super().__init__(f"{reason}: {formula!r}")
        self.formula = formula
        self.reason = reason


def compile_formula(formula: str, *, max_length: int | None = None) -> CompiledFormula:
    """数式文字列を `f(x) -> float` へコンパイルする（キャッシュなし）。

    Raises
    ------
    InvalidFormula
        空文字/長すぎる入力/構文エラー/x 以外の自由シンボル/未知の関数。
    """
    text = (formula or "").strip()
    if not text:
        raise InvalidFormula(formula, "empty formula")
    if max_length is not None and len(text) > max_length:
        raise InvalidFormula(formula, f"formula longer than {max_length} characters")
    try:
        with sp.evaluate(False):
            expr = parse_expr(
                text, local_dict=dict(_LOCALS), transformations=_TRANSFORMS, evaluate=False
            )
    except Exception as e:  # SyntaxError/TokenError/TypeError など sympy 由来は多様
        raise InvalidFormula(formula, f"syntax error ({type(e).__name__})") from e
    if not isinstance(expr, sp.Expr):
        raise InvalidFormula(formula, "not a numeric expression")

    unknown = sorted(str(s) for s in expr.free_symbols if s != _X)
    if unknown:
        raise InvalidFormula(formula, f"unknown symbol {', '.join(unknown)}")
    undefined = sorted(str(f.func) for f in expr.atoms(AppliedUndef))
    if undefined:
        raise InvalidFormula(formula, f"unknown function {', '.join(undefined)}")
    unsupported = sorted(
        {f.func.__name__ for f in expr.atoms(sp.Function) if f.func not in _ALLOWED_FUNCTIONS}
    )
    if unsupported:
        raise InvalidFormula(formula, f"unknown function {', '.join(unsupported)}")

    try:
        with sp.evaluate(False):
            expr = expr.xreplace({r: sp.Float(r) for r in expr.atoms(sp.Rational)})
            fn = sp.lambdify(_X, expr, modules="math")
    except Exception as e:
        raise InvalidFormula(formula, "cannot compile") from e

    def _compiled(x: float) -> float:
        try:
            y = fn(float(x))
        except Exception as e:  # 定義域/ゼロ除算/オーバーフロー/printer 非対応の関数など
            raise InvalidFormula(formula, f"evaluation error ({type(e).__name__})") from e
        if isinstance(y, complex):
            raise InvalidFormula(formula, "complex result")
        try:
            v = float(y)
        except (TypeError, ValueError) as e:
            raise InvalidFormula(formula, "non-numeric result") from e
        if not math.isfinite(v):
            raise InvalidFormula(formula, "non-finite result")
        return v

    return _compiled


class _FormulaCache:
    """コンパイル済み数式の LRU（失敗結果も保持）。"""

    def __init__(self, maxsize: int) -> None:
        self._maxsize = max(1, int(maxsize))
        self._entries: OrderedDict[str, CompiledFormula | InvalidFormula] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, formula: str, *, max_length: int | None) -> CompiledFormula:
        entry = self._entries.get(formula)
        if entry is not None:
            self.hits += 1
            self._entries.move_to_end(formula)
        else:
            self.misses += 1
            try:
                entry = compile_formula(formula, max_length=max_length)
            except InvalidFormula as e:
                entry = e
            self._entries[formula] = entry
            while len(self._entries) > self._maxsize:
                self._entries.popitem(last=False)
        if isinstance(entry, InvalidFormula):
            # 保持中の例外を再送出するたびにトレースバックが伸びないようにする
            raise entry.with_traceback(None)
        return entry

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


def _make_cache() -> _FormulaCache:
    from .settings import get as _get_settings

    return _FormulaCache(_get_settings().FORMULA_CACHE_MAXSIZE)


_shared_cache: _FormulaCache | None = None


def _cache() -> _FormulaCache:
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = _make_cache()
    return _shared_cache


def _max_length() -> int:
    from .settings import get as _get_settings

    return _get_settings().FORMULA_MAX_LENGTH


def evaluate(formula: str, x: float) -> float:
    """`formula` を `x` で評価して float を返す。失敗時は `InvalidFormula`。"""
    return _cache().get(formula, max_length=_max_length())(x)


class FormulaEvaluator:
    """フレーム安全な数式評価器。

    `sample()` は失敗時に 0.0 を返し、直近のエラー状態（人間向けメッセージ）を保持する。
    状態が変化したときだけ listener に通知する。ログは (数式, 理由) ごとに 1 回だけ出す。
    """

    def __init__(self, listener: ErrorListener | None = None) -> None:
        self._listener = listener
        self._error: str | None = None
        self._detail: str | None = None
        # 記録済みの (数式, 理由)。定義域の一部だけで失敗する数式でもログは 1 回
        self._logged: set[tuple[str, str]] = set()

    @property
    def error(self) -> str | None:
        """現在のエラーメッセージ（正常時は None）。"""
        return self._error

    @property
    def detail(self) -> str | None:
        """直近の失敗理由（ログ/HUD 用の詳細）。"""
        return self._detail

    def set_listener(self, listener: ErrorListener | None) -> None:
        self._listener = listener

    def evaluate(self, formula: str, x: float) -> float:
        """評価して値を返す。失敗は `InvalidFormula` を送出（状態は更新する）。"""
        try:
            value = evaluate(formula, x)
        except InvalidFormula as e:
            self._set_error(DEFAULT_ERROR_MESSAGE, e.reason)
            self._log_once(formula, e.reason)
            raise
        self._set_error(None, None)
        return value

    def sample(self, formula: str, x: float) -> float:
        """評価して値を返す。失敗時は 0.0（アニメーションを止めない）。"""
        try:
            return self.evaluate(formula, x)
        except InvalidFormula:
            return 0.0

    def _set_error(self, message: str | None, detail: str | None) -> None:
        if message == self._error and detail == self._detail:
            return
        self._error = message
        self._detail = detail
        if self._listener is not None:
            try:
                self._listener(message)
            except Exception:
                logger.exception("formula error listener failed")

    def _log_once(self, formula: str, reason: str) -> None:
        key = (formula, reason)
        if key in self._logged:
            return
        if len(self._logged) >= _MAX_LOGGED:
            self._logged.clear()
        self._logged.add(key)
        logger.warning("formula rejected: %s (%r)", reason, formula)


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "InvalidFormula",
    "FormulaEvaluator",
    "compile_formula",
    "evaluate",
]
