from __future__ import annotations

import numpy as np

from engine.core.history import HistoryBuffer


def test_push_keeps_newest_first_and_evicts_oldest() -> None:
    h = HistoryBuffer(3)
    for v in (1.0, 2.0, 3.0, 4.0):
        h.push(v)
    assert h.to_sequence() == (4.0, 3.0, 2.0)
    assert h.newest == 4.0
    assert len(h) == 3


def test_shrink_truncates_to_newest() -> None:
    h = HistoryBuffer(800)
    for i in range(800):
        h.push(float(i))
    h.capacity = 300
    assert len(h) == 300
    seq = h.to_sequence()
    assert seq[0] == 799.0
    assert seq[-1] == 500.0


def test_grow_keeps_samples_without_resampling() -> None:
    h = HistoryBuffer(2)
    h.push(1.0)
    h.push(2.0)
    h.capacity = 10
    assert h.to_sequence() == (2.0, 1.0)


def test_capacity_is_at_least_one() -> None:
    h = HistoryBuffer(0)
    assert h.capacity == 1
    h.push(5.0)
    h.push(6.0)
    assert h.to_sequence() == (6.0,)
    h.capacity = -4
    assert h.capacity == 1


def test_as_array_is_a_copy() -> None:
    h = HistoryBuffer(4)
    h.push(1.5)
    arr = h.as_array()
    assert arr.dtype == np.float64
    arr[0] = 99.0
    assert h.newest == 1.5
    h.clear()
    assert len(h) == 0
    assert h.newest is None
    assert h.as_array().shape == (0,)
