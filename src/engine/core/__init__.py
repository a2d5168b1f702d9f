"""
どこで: `engine.core` サブパッケージ。
何を: エピサイクル計算・履歴バッファ・フレームスケジューラ・描画ウィンドウを提供。
なぜ: 計算と描画の基盤を構成し、上位層（UI/Render/API）から再利用可能にするため。
"""
