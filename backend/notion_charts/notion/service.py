# backend/notion_charts/notion/service.py

"""
Notion クライアントとチャート変換をつなぐサービス層。

- データベース全レコードの取得
- スキーマ（プロパティ名と型）の取得
- コントリビューションエントリへの変換
"""

import logging
import re
from typing import Any, Dict, List

from notion_charts.charts.schemas import ContributionEntry

from .client import NotionClient
from .properties import get_property_value
from .schemas import PropertySchema

logger = logging.getLogger(__name__)

NUMERIC_TYPES = {"number", "formula", "rollup"}
CATEGORY_TYPES = {"select", "multi_select", "status", "checkbox"}
TEXT_TYPES = {"title", "rich_text"}

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class NotionService:
    """
    NotionClient を利用して、チャート変換が扱える形のデータを返すサービス。

    クライアントは呼び出し側で生成して注入する。
    """

    def __init__(self, client: NotionClient) -> None:
        self.client = client

    def fetch_all_records(self, database_id: str) -> List[Dict[str, Any]]:
        """
        データベースの全レコードを Notion API の生のページオブジェクトとして返す。
        """
        return self.client.query_database(database_id)

    def fetch_schema(self, database_id: str) -> List[PropertySchema]:
        """
        データベースのプロパティ定義を PropertySchema のリストとして返す。
        """
        database = self.client.retrieve_database(database_id)
        properties: Dict[str, Any] = database.get("properties", {}) or {}

        result: List[PropertySchema] = []
        for name, prop in properties.items():
            prop_type = prop.get("type", "") if isinstance(prop, dict) else ""
            result.append(
                PropertySchema(
                    name=name,
                    type=prop_type,
                    is_numeric=prop_type in NUMERIC_TYPES,
                    is_category=prop_type in CATEGORY_TYPES,
                    is_date=prop_type == "date",
                    is_text=prop_type in TEXT_TYPES,
                )
            )
        return result

    def fetch_contribution_entries(
        self,
        database_id: str,
        date_property: str,
        subject_property: str,
        description_property: str,
    ) -> List[ContributionEntry]:
        """
        全レコードを取得し、ContributionEntry のリストに変換する。

        - 日付が文字列でないレコードはスキップ
        - 日時は日付部分（YYYY-MM-DD）だけを使う
        - subject / description が None の場合は空文字列
        """
        entries: List[ContributionEntry] = []
        skipped = 0

        for page in self.fetch_all_records(database_id):
            raw_date = get_property_value(page, date_property)
            if not raw_date or not isinstance(raw_date, str):
                skipped += 1
                continue

            day = raw_date.split("T")[0]
            if not _DAY_RE.match(day):
                skipped += 1
                continue

            subject = get_property_value(page, subject_property)
            description = get_property_value(page, description_property)
            entries.append(
                ContributionEntry(
                    date=day,
                    subject=_to_text(subject),
                    description=_to_text(description),
                )
            )

        if skipped:
            logger.warning(
                "Skipped %d records without a usable '%s' date in database %s",
                skipped,
                date_property,
                database_id,
            )
        return entries


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
