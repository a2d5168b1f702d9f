"""
どこで: `util.constants`。
何を: 描画レイアウト・既定キャンバスサイズ・UI レンジなどの定数。
なぜ: ランナー/シーン構成/設定ウィンドウで同じ値を参照するため。
"""

from __future__ import annotations

# キャンバス既定サイズ [px]
DEFAULT_CANVAS_SIZE: tuple[int, int] = (1200, 400)
DEFAULT_FPS = 60

# 1 フレームあたりの角時間の基準増分（frequency·speed を掛ける）
DEFAULT_TIME_STEP = 0.01

# シーンのレイアウト [px]
CHAIN_CENTER_X = 200.0  # 円の連鎖の中心 x（y はキャンバス高さの半分）
WAVE_OFFSET_X = 150.0  # 連鎖中心から波形の開始点までの距離
MARKER_RADIUS = 2.0  # 最終点マーカーの半径

# UI レンジ（スライダー/入力欄の表示範囲。ParameterSet 自体は下限のみ強制）
RADIUS_RANGE: tuple[float, float] = (10.0, 100.0)
SPEED_RANGE: tuple[float, float] = (1.0, 10.0)
FREQUENCY_RANGE: tuple[float, float] = (1.0, 25.0)
HARMONICS_RANGE: tuple[int, int] = (1, 50)

PNG_NAME_PREFIX = "fourier-waveform"

INFO_TEXT = (
    "This interactive visualization demonstrates how Fourier series can approximate "
    "complex periodic functions using a sum of simple sine waves. The rotating circles "
    "represent different harmonics, and their combined motion traces the resulting "
    "waveform. Adjust the parameters to explore how different combinations create "
    "unique wave patterns."
)
