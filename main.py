from __future__ import annotations

from api import ParameterSet, Waveform, run

# 7 本の奇数次高調波で矩形波を近似する
PARAMS = ParameterSet(
    base_radius=80,
    frequency=10,
    harmonic_count=7,
    waveform=Waveform.square(),
)


if __name__ == "__main__":
    run(params=PARAMS)
