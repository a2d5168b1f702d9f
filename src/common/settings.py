"""
どこで: `common.settings`
何を: プロジェクトの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, env_str


@dataclass
class _Settings:
    # アニメーション
    FPS: int | None = None  # None なら config/既定値で解決
    TIME_STEP: float | None = None  # None なら config/既定値で解決

    # 数式評価
    FORMULA_CACHE_MAXSIZE: int = 64
    FORMULA_MAX_LENGTH: int = 512

    # UI
    SETTINGS_GUI: bool = True
    HUD_ENABLED: bool = True

    # Misc
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - int は `env_int`、float は `env_float`、bool は `env_bool` を使用。
    - 一部は下限丸めやフォールバックを適用。
    """

    # アニメーション
    _settings.FPS = env_int("HMD_FPS", None, min_value=1)
    _settings.TIME_STEP = env_float("HMD_TIME_STEP", None, min_value=0.0)

    # 数式評価（下限丸め）
    _settings.FORMULA_CACHE_MAXSIZE = env_int("HMD_FORMULA_CACHE_MAXSIZE", 64, min_value=1) or 1
    _settings.FORMULA_MAX_LENGTH = env_int("HMD_FORMULA_MAX_LENGTH", 512, min_value=1) or 1

    # UI
    _settings.SETTINGS_GUI = env_bool("HMD_SETTINGS_GUI", True)
    _settings.HUD_ENABLED = env_bool("HMD_HUD_ENABLED", True)

    # Misc
    _settings.LOG_LEVEL = env_str("HMD_LOG_LEVEL", "INFO").upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
