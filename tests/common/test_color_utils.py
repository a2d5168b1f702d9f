from __future__ import annotations

import pytest

from util.color import normalize_color, parse_hex_color_str, to_hex_rgb, to_u8_rgba


def _approx_tuple(t):
    return tuple(round(v, 6) for v in t)


def test_parse_hex_color_valid_variants() -> None:
    expected = (round(0x11 / 255.0, 6), round(0x22 / 255.0, 6), round(0x33 / 255.0, 6))
    assert _approx_tuple(parse_hex_color_str("#112233")) == (*expected, 1.0)
    assert _approx_tuple(parse_hex_color_str("0x112233CC")) == (*expected, round(0xCC / 255.0, 6))
    assert _approx_tuple(parse_hex_color_str("112233")) == (*expected, 1.0)


def test_parse_hex_color_invalid() -> None:
    with pytest.raises(ValueError):
        parse_hex_color_str("#123")
    with pytest.raises(ValueError):
        parse_hex_color_str("not-a-color")


def test_normalize_color_from_tuples() -> None:
    assert _approx_tuple(normalize_color((0.1, 0.2, 0.3))) == (0.1, 0.2, 0.3, 1.0)
    assert _approx_tuple(normalize_color((255, 128, 0, 64))) == (
        1.0,
        round(128 / 255.0, 6),
        0.0,
        round(64 / 255.0, 6),
    )
    with pytest.raises(ValueError):
        normalize_color(42)


def test_to_u8_rgba_and_hex() -> None:
    assert to_u8_rgba("#FF00FF80") == (255, 0, 255, 128)
    assert to_u8_rgba((0.0, 1.0, 0.5)) == (0, 255, 128, 255)
    assert to_hex_rgb("#60A5FA") == "#60a5fa"
    assert to_hex_rgb([96, 165, 250]) == "#60a5fa"
