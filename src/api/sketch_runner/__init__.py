"""
内部ヘルパ群（API 非公開）。

どこで: `api.sketch_runner`
何を: `api.sketch` の補助（設定解決の純粋関数、キーボード操作のアクション）を分離する。
なぜ: `run` 本体を薄く保ち、ウィンドウ無しでテストできる部分を切り出すため。
"""

from __future__ import annotations

__all__: list[str] = []
