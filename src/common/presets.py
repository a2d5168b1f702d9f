"""
どこで: `common.presets`
何を: 数式ライブラリ（定番波形の部分和）のプリセット一覧。
なぜ: custom 波形の入力例をワンクリックで適用できるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormulaPreset:
    name: str
    formula: str


BUILTIN_PRESETS: tuple[FormulaPreset, ...] = (
    FormulaPreset("Sine Wave", "sin(x)"),
    FormulaPreset("Square Wave", "sin(x) + (1/3)*sin(3*x) + (1/5)*sin(5*x)"),
    FormulaPreset("Triangle Wave", "sin(x) - (1/9)*sin(3*x) + (1/25)*sin(5*x)"),
    FormulaPreset("Sawtooth Wave", "sin(x) - (1/2)*sin(2*x) + (1/3)*sin(3*x)"),
)

CUSTOM_PRESET_NAME = "Custom Wave"


def formula_presets(current_formula: str) -> list[FormulaPreset]:
    """組み込みプリセット + 現在入力中の数式（"Custom Wave"）を返す。"""
    return [*BUILTIN_PRESETS, FormulaPreset(CUSTOM_PRESET_NAME, current_formula)]


def find_preset(name: str, current_formula: str = "") -> FormulaPreset:
    """名前（大文字/小文字は無視）でプリセットを引く。見つからなければ KeyError。"""
    key = name.strip().lower()
    for p in formula_presets(current_formula):
        if p.name.lower() == key:
            return p
    allowed = ", ".join(p.name for p in formula_presets(current_formula))
    raise KeyError(f"unknown preset: {name}; allowed={allowed}")


__all__ = ["FormulaPreset", "BUILTIN_PRESETS", "CUSTOM_PRESET_NAME", "formula_presets", "find_preset"]
