# backend/notion_charts/storage/factory.py

"""
保存済みチャートストアの簡易ファクトリ。

- CHARTS_STORE_PATH が設定されていれば JsonFileChartStore
- 未設定ならプロセス内の InMemoryChartStore
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from notion_charts.utils.config import get_env

from .store import InMemoryChartStore, JsonFileChartStore, SavedChartStore

logger = logging.getLogger(__name__)

_chart_store: Optional[SavedChartStore] = None


def get_chart_store() -> SavedChartStore:
    """
    アプリ全体で共有する SavedChartStore を返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _chart_store
    if _chart_store is None:
        path = get_env("CHARTS_STORE_PATH", required=False)
        if path:
            logger.info("Using JSON chart store at %s", path)
            _chart_store = JsonFileChartStore(Path(path))
        else:
            _chart_store = InMemoryChartStore()
    return _chart_store


def reset_chart_store() -> None:
    """
    テスト用にストアのシングルトン状態をリセットする。
    """
    global _chart_store
    _chart_store = None
