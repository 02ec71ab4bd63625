# backend/tests/conftest.py
"""
Pytest configuration for Notion Charts backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import notion_charts.*` works correctly in tests.
- Ensures required environment variables for tests are set
  with safe dummy values (e.g., NOTION_TOKEN).
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    In real environments, proper values should be provided via .env or system env.
    """
    os.environ.setdefault("NOTION_TOKEN", "dummy-notion-token-for-tests")
    os.environ.setdefault("CHARTS_TIMEZONE", "UTC")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


@pytest.fixture(autouse=True)
def _reset_cached_state():
    """
    キャッシュされた設定・シングルトンをテストごとにリセットする。
    """
    from notion_charts.notion.config import get_notion_config
    from notion_charts.notion.router import _build_notion_service
    from notion_charts.storage.factory import reset_chart_store

    get_notion_config.cache_clear()
    _build_notion_service.cache_clear()
    reset_chart_store()
    yield
    get_notion_config.cache_clear()
    _build_notion_service.cache_clear()
    reset_chart_store()
