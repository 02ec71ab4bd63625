# backend/notion_charts/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from functools import lru_cache

from notion_charts.utils.config import get_env, get_env_float

DEFAULT_API_BASE_URL = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: str
    api_base_url: str = DEFAULT_API_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = 10.0


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    必須:
      - NOTION_TOKEN

    任意:
      - NOTION_API_BASE_URL    (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION     (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS (デフォルト: 10)

    データベース ID はリクエストごとに指定されるため、ここには含めない。
    """
    api_key = get_env("NOTION_TOKEN")

    api_base_url = get_env(
        "NOTION_API_BASE_URL",
        default=DEFAULT_API_BASE_URL,
        required=False,
    )
    api_version = get_env(
        "NOTION_API_VERSION",
        default=DEFAULT_API_VERSION,
        required=False,
    )
    timeout_seconds = get_env_float("NOTION_TIMEOUT_SECONDS", default=10.0)

    return NotionConfig(
        api_key=api_key,
        api_base_url=api_base_url.rstrip("/"),
        api_version=api_version,
        timeout_seconds=timeout_seconds,
    )
