from __future__ import annotations

import math

import pytest

from common.formula import FormulaEvaluator
from common.params import ParameterSet, Waveform
from engine.core.epicycle import harmonic_index, harmonic_radius, step


def test_harmonic_index_and_radius() -> None:
    assert [harmonic_index(i) for i in range(4)] == [1, 3, 5, 7]
    assert harmonic_radius(100.0, 1) == pytest.approx(400.0 / math.pi)
    assert harmonic_radius(100.0, 3) == pytest.approx(400.0 / (3 * math.pi))


def test_single_sine_vector_at_quarter_turn() -> None:
    p = ParameterSet(harmonic_count=1, base_radius=100.0)
    r = step(math.pi / 2, p)
    x, y = r.final_point
    assert x == pytest.approx(0.0, abs=1e-9)
    assert y == pytest.approx(127.3, abs=0.05)
    assert r.sample == y
    assert len(r.vectors) == 1
    v = r.vectors[0]
    assert (v.origin_x, v.origin_y) == (0.0, 0.0)
    assert v.harmonic == 1


def test_vectors_chain_end_to_start_and_sum_to_final_point() -> None:
    p = ParameterSet(harmonic_count=5, waveform=Waveform.triangle())
    r = step(0.37, p)
    assert len(r.vectors) == 5
    for a, b in zip(r.vectors, r.vectors[1:]):
        assert (b.origin_x, b.origin_y) == (a.end_x, a.end_y)
    assert r.final_point == (r.vectors[-1].end_x, r.vectors[-1].end_y)
    assert sum(v.dx for v in r.vectors) == pytest.approx(r.final_point[0])
    assert sum(v.dy for v in r.vectors) == pytest.approx(r.final_point[1])
    assert [v.harmonic for v in r.vectors] == [1, 3, 5, 7, 9]


def test_x_component_is_pure_rotation_for_every_mode() -> None:
    t = 1.234
    for wf in (Waveform.sine(), Waveform.square(), Waveform.sawtooth(), Waveform.custom("0")):
        r = step(t, ParameterSet(harmonic_count=3, waveform=wf))
        for v in r.vectors:
            assert v.dx == pytest.approx(v.radius * math.cos(v.harmonic * t))


def test_at_time_zero_sine_sample_is_zero() -> None:
    r = step(0.0, ParameterSet(harmonic_count=10))
    assert r.sample == pytest.approx(0.0)


def test_custom_formula_failure_does_not_raise() -> None:
    ev = FormulaEvaluator()
    r = step(0.5, ParameterSet(harmonic_count=2, waveform=Waveform.custom("1/(")), evaluator=ev)
    assert r.sample == 0.0
    assert ev.error is not None


def test_harmonic_count_below_one_is_treated_as_one() -> None:
    p = ParameterSet(harmonic_count=0)
    assert p.harmonic_count == 1
    assert len(step(0.1, p).vectors) == 1
