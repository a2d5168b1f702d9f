"""
どこで: `engine.render` サブパッケージ。
何を: 描画プリミティブ・描画面（Render Adapter）プロトコル・フレーム構成（scene）・pyglet 実装を提供。
なぜ: 計算（core）と描画の責務を分離し、描画先を差し替え可能（テストでは記録用サーフェス）にするため。
"""
