# backend/notion_charts/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /api/notion/* チャートデータ取得エンドポイントを公開する
- /api/charts/* 保存済みチャート・埋め込み URL エンドポイントを公開する
"""

import logging

from fastapi import FastAPI

from notion_charts.charts.router import router as charts_router
from notion_charts.notion.router import router as notion_router
from notion_charts.storage.router import router as storage_router
from notion_charts.utils.config import get_env


def _configure_logging() -> None:
    """
    LOG_LEVEL（デフォルト INFO）でルートロガーを設定する。
    """
    level_name = get_env("LOG_LEVEL", default="INFO", required=False).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - Notion チャートデータエンドポイント (/api/notion)
    - 保存済みチャート・埋め込み URL エンドポイント (/api/charts)
    - ヘルスチェックエンドポイント (/health)
    """
    _configure_logging()

    app = FastAPI(title="Notion Charts Backend")

    # ルーター登録
    app.include_router(notion_router)
    app.include_router(charts_router)
    app.include_router(storage_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
