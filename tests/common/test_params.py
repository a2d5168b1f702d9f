from __future__ import annotations

import math
import random

import pytest

from common.params import (
    DEFAULT_COLOR,
    MIN_POSITIVE,
    ParameterSet,
    RenderStyle,
    Waveform,
    random_hex_color,
)


def test_defaults() -> None:
    p = ParameterSet()
    assert p.base_radius == 100.0
    assert p.speed_multiplier == 1.0
    assert p.frequency == 12.0
    assert p.harmonic_count == 1
    assert p.waveform == Waveform.sine()
    assert p.time_increment == pytest.approx(12.0)


def test_waveform_variants() -> None:
    assert Waveform.custom("x").formula == "x"
    assert Waveform.square().formula is None
    assert Waveform("triangle", "ignored").formula is None
    assert Waveform.custom("").is_custom
    with pytest.raises(ValueError):
        Waveform("zigzag")  # type: ignore[arg-type]


def test_waveform_parse_unknown_falls_back_to_sine() -> None:
    assert Waveform.parse("SQUARE") == Waveform.square()
    assert Waveform.parse("custom", "sin(x)") == Waveform.custom("sin(x)")
    assert Waveform.parse("zigzag") == Waveform.sine()
    assert Waveform.parse(None) == Waveform.sine()


def test_with_changes_clamps_and_keeps_previous_on_garbage() -> None:
    p = ParameterSet()
    q = p.with_changes(harmonic_count=0, base_radius=-5, frequency="abc", speed_multiplier=math.nan)
    assert q.harmonic_count == 1
    assert q.base_radius == MIN_POSITIVE
    assert q.frequency == p.frequency
    assert q.speed_multiplier == p.speed_multiplier
    # 元は不変
    assert p.base_radius == 100.0


def test_with_changes_accepts_numeric_strings_and_truncates_count() -> None:
    q = ParameterSet().with_changes(harmonic_count="7.9", frequency="3.5")
    assert q.harmonic_count == 7
    assert q.frequency == 3.5


def test_with_changes_unknown_name_raises() -> None:
    with pytest.raises(TypeError):
        ParameterSet().with_changes(radius=10)


def test_with_changes_no_effect_returns_same_instance() -> None:
    p = ParameterSet()
    assert p.with_changes(frequency="bad") is p


def test_from_mapping() -> None:
    p = ParameterSet.from_mapping(
        {"base_radius": 50, "harmonic_count": 3, "waveform": "custom", "formula": "x", "extra": 1}
    )
    assert p.base_radius == 50.0
    assert p.harmonic_count == 3
    assert p.waveform == Waveform.custom("x")
    assert ParameterSet.from_mapping(None) == ParameterSet()


def test_render_style_resized_grows_with_random_colors_and_shrinks() -> None:
    st = RenderStyle()
    grown = st.resized(4, rng=random.Random(1))
    assert len(grown.circle_colors) == 4
    assert grown.circle_colors[0] == DEFAULT_COLOR
    assert all(c.startswith("#") and len(c) == 7 for c in grown.circle_colors)
    shrunk = grown.resized(2)
    assert shrunk.circle_colors == grown.circle_colors[:2]
    assert shrunk.resized(2) is shrunk


def test_render_style_circle_color_fallback_and_set() -> None:
    st = RenderStyle(circle_colors=("#ff0000",))
    assert st.circle_color(5) == "#ff0000"
    st2 = st.with_circle_color(0, "#00ff00")
    assert st2.circle_color(0) == "#00ff00"
    with pytest.raises(IndexError):
        st.with_circle_color(3, "#000000")


def test_random_hex_color_format() -> None:
    r = random.Random(3)
    for _ in range(20):
        c = random_hex_color(r)
        assert len(c) == 7
        int(c[1:], 16)


def test_direct_construction_is_clamped() -> None:
    p = ParameterSet(base_radius=0, speed_multiplier=-2.0, frequency=-5.0, harmonic_count=-3)
    assert p.base_radius == MIN_POSITIVE
    assert p.speed_multiplier == MIN_POSITIVE
    assert p.frequency == MIN_POSITIVE
    assert p.harmonic_count == 1
    assert p.time_increment > 0.0


def test_direct_construction_replaces_garbage_with_defaults() -> None:
    p = ParameterSet(frequency=math.inf, base_radius="abc", harmonic_count=4.7)  # type: ignore[arg-type]
    assert p.frequency == 12.0
    assert p.base_radius == 100.0
    assert p.harmonic_count == 4
