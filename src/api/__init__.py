"""
どこで: `api` 入口（高レベル公開 API）。
何を: 実行ランナー `run` と、初期設定に使う `ParameterSet`/`RenderStyle`/`Waveform` を再輸出。
なぜ: 利用者が単一名前空間から設定→実行まで完結できるようにするため。

Usage:
    from api import ParameterSet, Waveform, run

    run(params=ParameterSet(harmonic_count=7, waveform=Waveform.square()))
"""

from common.params import ParameterSet, RenderStyle, Waveform

from .sketch import run

__all__ = [
    "run",
    "ParameterSet",
    "RenderStyle",
    "Waveform",
]

# バージョン情報
__version__ = "2025.10"
