"""
どこで: `common` パッケージ。
何を: 波形生成・数式評価・パラメータモデル・設定/ロギングの軽量ユーティリティ。
なぜ: エンジン/UI/API 層から共通に使う純粋ロジックを分離し、依存の向きを単純化するため。
"""
