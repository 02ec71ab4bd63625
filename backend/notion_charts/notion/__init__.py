# backend/notion_charts/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- Notion API からデータベースの全レコードとスキーマを読み取る
- プロパティ値をチャート変換が扱えるスカラー値に正規化する
- チャートデータ取得エンドポイントを公開する
"""
