# backend/notion_charts/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import NotionConfig

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionNotFoundError(NotionClientError):
    """データベースが存在しない、またはインテグレーションに共有されていない場合のエラー。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""


def _error_code(response: httpx.Response) -> Optional[str]:
    """
    Notion のエラーレスポンス本文から code（object_not_found など）を取り出す。
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("code"), str):
        return body["code"]
    return None


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    - データベースの全件 query（ページネーション込み）
    - データベースのスキーマ取得

    設定値はコンストラクタで明示的に受け取る。生成と資格情報の検証は
    呼び出し側（ルーターの依存関係）で一度だけ行う。
    """

    def __init__(self, config: NotionConfig) -> None:
        self.config = config

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_TOKEN.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code == 404 or _error_code(response) == "object_not_found":
            raise NotionNotFoundError(
                "Could not find database. Check the ID and integration permissions."
            )
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}"
            )

    def query_database(self, database_id: str) -> List[Dict[str, Any]]:
        """
        データベースの全レコードを取得する。

        has_more / next_cursor を辿って全ページを取得し、
        properties を持つ完全なページオブジェクトだけを返す。
        """
        url = f"{self.config.api_base_url}/databases/{database_id}/query"

        pages: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            payload: Dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                payload["start_cursor"] = cursor

            try:
                response = httpx.post(
                    url,
                    headers=self._build_headers(),
                    json=payload,
                    timeout=self.config.timeout_seconds,
                )
            except httpx.RequestError as exc:
                raise NotionClientError(f"Failed to call Notion API: {exc}") from exc

            self._raise_for_status(response)

            data = response.json()
            results = data.get("results", [])
            if not isinstance(results, list):
                raise NotionAPIError(
                    "Unexpected Notion API response format: 'results' is not a list."
                )

            # 部分オブジェクト（properties を持たないもの）は除外する
            pages.extend(
                page for page in results
                if isinstance(page, dict) and "properties" in page
            )

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        logger.debug("Fetched %d pages from database %s", len(pages), database_id)
        return pages

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """
        データベースオブジェクト（プロパティ定義を含む）を取得する。
        """
        url = f"{self.config.api_base_url}/databases/{database_id}"

        try:
            response = httpx.get(
                url,
                headers=self._build_headers(),
                timeout=self.config.timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to retrieve Notion database: {exc}") from exc

        self._raise_for_status(response)

        data = response.json()
        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response format: database is not an object.")
        return data
