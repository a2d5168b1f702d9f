from __future__ import annotations

import logging
import math

import pytest

from common.formula import (
    DEFAULT_ERROR_MESSAGE,
    FormulaEvaluator,
    InvalidFormula,
    compile_formula,
    evaluate,
)


def test_evaluate_basic_expressions() -> None:
    assert evaluate("sin(x)", math.pi / 2) == pytest.approx(1.0)
    assert evaluate("2*x + 1", 3.0) == pytest.approx(7.0)
    assert evaluate("x^2", 3.0) == pytest.approx(9.0)  # ^ はべき乗
    assert evaluate("cos(pi*x)", 1.0) == pytest.approx(-1.0)
    assert evaluate("abs(x) + ln(e)", -2.0) == pytest.approx(3.0)


def test_default_formula_value() -> None:
    x = 0.8
    assert evaluate("sin(x) + 0.5*sin(3*x)", x) == pytest.approx(math.sin(x) + 0.5 * math.sin(3 * x))


@pytest.mark.parametrize(
    "formula",
    ["", "   ", "sin(x", "x +", "y + 1", "foo(x)", "x = 1"],
)
def test_compile_rejects_invalid(formula: str) -> None:
    with pytest.raises(InvalidFormula):
        compile_formula(formula)(0.5)


def test_compile_rejects_too_long() -> None:
    with pytest.raises(InvalidFormula):
        compile_formula("x+" * 100 + "x", max_length=50)


@pytest.mark.parametrize(
    "formula,x",
    [("1/x", 0.0), ("log(x)", -1.0), ("sqrt(x)", -4.0), ("1/0", 1.0)],
)
def test_evaluation_failures_are_invalid_formula(formula: str, x: float) -> None:
    with pytest.raises(InvalidFormula):
        evaluate(formula, x)


def test_invalid_formula_is_value_error_with_reason() -> None:
    with pytest.raises(ValueError) as ei:
        evaluate("sin(", 0.0)
    assert isinstance(ei.value, InvalidFormula)
    assert ei.value.formula == "sin("
    assert "syntax" in ei.value.reason


def test_evaluator_sample_recovers_after_fix() -> None:
    seen: list[str | None] = []
    ev = FormulaEvaluator(listener=seen.append)
    assert ev.sample("sin(", 1.0) == 0.0
    assert ev.error == DEFAULT_ERROR_MESSAGE
    assert ev.detail is not None
    # 同じ失敗の繰り返しでは再通知しない
    assert ev.sample("sin(", 2.0) == 0.0
    assert seen == [DEFAULT_ERROR_MESSAGE]
    assert ev.sample("sin(x)", 0.0) == pytest.approx(0.0)
    assert ev.error is None
    assert seen == [DEFAULT_ERROR_MESSAGE, None]


def test_evaluator_evaluate_raises_and_records() -> None:
    ev = FormulaEvaluator()
    with pytest.raises(InvalidFormula):
        ev.evaluate("1/x", 0.0)
    assert ev.error == DEFAULT_ERROR_MESSAGE


def test_listener_failure_does_not_break_sampling() -> None:
    def boom(_msg: str | None) -> None:
        raise RuntimeError("listener")

    ev = FormulaEvaluator(listener=boom)
    assert ev.sample("nope(", 0.0) == 0.0
    assert ev.error == DEFAULT_ERROR_MESSAGE


@pytest.mark.parametrize(
    "formula,x,expected",
    [
        ("sin(x)", 0.3, math.sin(0.3)),
        ("cos(x)", 0.3, math.cos(0.3)),
        ("tan(x)", 0.3, math.tan(0.3)),
        ("asin(x)", 0.3, math.asin(0.3)),
        ("acos(x)", 0.3, math.acos(0.3)),
        ("atan(x)", 0.3, math.atan(0.3)),
        ("sinh(x)", 0.3, math.sinh(0.3)),
        ("cosh(x)", 0.3, math.cosh(0.3)),
        ("tanh(x)", 0.3, math.tanh(0.3)),
        ("exp(x)", 0.3, math.exp(0.3)),
        ("log(x)", 0.3, math.log(0.3)),
        ("sqrt(x)", 0.3, math.sqrt(0.3)),
        ("abs(x)", -0.4, 0.4),
        ("floor(x)", -0.4, -1.0),
        ("ceil(x)", -1.4, -1.0),
        ("ceil(x)", 1.2, 2.0),
        ("sign(x)", -0.4, -1.0),
        ("sign(x)", 0.0, 0.0),
        ("pi + e", 0.0, math.pi + math.e),
    ],
)
def test_supported_functions_and_constants(formula: str, x: float, expected: float) -> None:
    assert evaluate(formula, x) == pytest.approx(expected)


@pytest.mark.parametrize("formula", ["zeta(x)", "besselj(0, x)", "polygamma(0, x)", "gamma(x)"])
def test_functions_outside_math_are_rejected(formula: str) -> None:
    with pytest.raises(InvalidFormula) as ei:
        compile_formula(formula)
    assert "unknown function" in ei.value.reason


def test_sample_with_unsupported_function_returns_zero() -> None:
    ev = FormulaEvaluator()
    assert ev.sample("zeta(x)", 1.5) == 0.0
    assert ev.error == DEFAULT_ERROR_MESSAGE


@pytest.mark.parametrize("formula", ["9^9^9", "e^9^9^9", "2^(10^10)"])
def test_huge_integer_powers_fail_fast(formula: str) -> None:
    ev = FormulaEvaluator()
    assert ev.sample(formula, 1.0) == 0.0
    assert ev.error == DEFAULT_ERROR_MESSAGE


def test_integer_powers_still_evaluate() -> None:
    assert evaluate("2^10", 0.0) == pytest.approx(1024.0)
    assert evaluate("x^3 - 1/2", 2.0) == pytest.approx(7.5)


def test_partial_domain_failure_logs_once(caplog: pytest.LogCaptureFixture) -> None:
    ev = FormulaEvaluator()
    with caplog.at_level(logging.WARNING, logger="common.formula"):
        for i in range(100):
            ev.sample("sqrt(sin(x))", 1.0 if i % 2 == 0 else -1.0)
    rejected = [r for r in caplog.records if "formula rejected" in r.getMessage()]
    assert len(rejected) == 1
    # 成功サンプルではエラー状態は解除される
    ev.sample("sqrt(sin(x))", 1.0)
    assert ev.error is None
