"""
保存済みチャート設定のストア。

- schemas: SavedChart と作成・更新リクエスト
- store: InMemoryChartStore / JsonFileChartStore
- factory: アプリ全体で共有するストアの取得
- router: /api/charts の CRUD エンドポイント
"""
