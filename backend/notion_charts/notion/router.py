# backend/notion_charts/notion/router.py

"""
Notion データベースからチャートデータを返す FastAPI ルーター定義。

- GET /api/notion/{database_id}
- GET /api/notion/timeseries/{database_id}
- GET /api/notion/schema/{database_id}
- GET /api/notion/contribution/{database_id}
- GET /api/notion/contribution/{database_id}/calendar

ルーターは入力検証と例外の HTTP ステータス変換だけを担い、
変換ロジックは notion_charts.charts に委ねる。
"""

import json
import logging
from functools import lru_cache
from typing import Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from notion_charts.charts.calendar import build_calendar
from notion_charts.charts.config import ChartSettings, get_chart_settings
from notion_charts.charts.post_processing import get_palette, post_process, resolve_colors
from notion_charts.charts.schemas import (
    CalendarGrid,
    CalendarMode,
    ChartDataPoint,
    Granularity,
    PostProcessOptions,
    TransformOptions,
)
from notion_charts.charts.transformers import aggregate, bucket_time_series, count_by_property
from notion_charts.utils.config import EnvVarMissingError

from .client import NotionAuthError, NotionClient, NotionNotFoundError
from .config import get_notion_config
from .schemas import ChartDataResponse, ContributionResponse, SchemaResponse
from .service import NotionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notion", tags=["notion"])

MIN_DATABASE_ID_LENGTH = 32


@lru_cache()
def _build_notion_service() -> NotionService:
    return NotionService(NotionClient(get_notion_config()))


def get_notion_service() -> NotionService:
    """
    NotionService のシングルトンインスタンスを取得する。

    NOTION_TOKEN が未設定の場合は 500（not configured）として扱う。
    テストでは dependency_overrides で差し替える。
    """
    try:
        return _build_notion_service()
    except EnvVarMissingError as exc:
        logger.error("Notion client is not configured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Notion token not configured",
        ) from exc


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _validate_database_id(database_id: str) -> None:
    if not database_id or len(database_id) < MIN_DATABASE_ID_LENGTH:
        raise _bad_request("Invalid database ID format")


def _require(**params: Optional[str]) -> None:
    """
    必須クエリパラメータのうち未指定のものを列挙して 400 にする。
    """
    missing = [name for name, value in params.items() if not value]
    if missing:
        label = "parameter" if len(missing) == 1 else "parameters"
        raise _bad_request(f"Missing required {label}: {', '.join(missing)}")


def _raise_upstream_error(exc: Exception) -> NoReturn:
    """
    Notion 呼び出し時の例外を HTTP エラーに変換する。
    """
    if isinstance(exc, NotionNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Database not found. Check the ID and integration permissions.",
        ) from exc
    if isinstance(exc, NotionAuthError):
        logger.error("Notion rejected the integration token: %s", exc)
    else:
        logger.exception("Notion API error")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to fetch data from Notion",
    ) from exc


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_category_colors(raw: Optional[str]) -> Dict[str, str]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise _bad_request("Invalid catColors: must be a JSON object") from exc
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise _bad_request("Invalid catColors: must map category names to colors")
    return value


@router.get(
    "/timeseries/{database_id}",
    response_model=ChartDataResponse,
    summary="日付プロパティで集計した時系列データを取得",
)
def get_time_series(
    database_id: str,
    date: Optional[str] = Query(None, description="日付プロパティ名"),
    value: Optional[str] = Query(None, description="値プロパティ名（省略時は件数）"),
    granularity: Granularity = Query(Granularity.DAY),
    service: NotionService = Depends(get_notion_service),
    settings: ChartSettings = Depends(get_chart_settings),
) -> ChartDataResponse:
    """
    日 / 週 / 月のバケットごとに値を合計する。バケットキーの昇順で返す。
    """
    _require(date=date)
    _validate_database_id(database_id)

    try:
        records = service.fetch_all_records(database_id)
    except Exception as exc:  # noqa: BLE001
        _raise_upstream_error(exc)

    data = bucket_time_series(records, date, value, granularity, tz=settings.timezone)
    return ChartDataResponse(data=data, count=len(records))


@router.get(
    "/schema/{database_id}",
    response_model=SchemaResponse,
    summary="データベースのプロパティ一覧を取得",
)
def get_schema(
    database_id: str,
    service: NotionService = Depends(get_notion_service),
) -> SchemaResponse:
    _validate_database_id(database_id)

    try:
        properties = service.fetch_schema(database_id)
    except Exception as exc:  # noqa: BLE001
        _raise_upstream_error(exc)

    return SchemaResponse(properties=properties, count=len(properties))


@router.get(
    "/contribution/{database_id}",
    response_model=ContributionResponse,
    summary="コントリビューションカレンダー用のエントリを取得",
)
def get_contribution_entries(
    database_id: str,
    date: Optional[str] = Query(None, description="日付プロパティ名"),
    subject: Optional[str] = Query(None, description="件名プロパティ名"),
    description: Optional[str] = Query(None, description="説明プロパティ名"),
    service: NotionService = Depends(get_notion_service),
) -> ContributionResponse:
    _require(date=date, subject=subject, description=description)
    _validate_database_id(database_id)

    try:
        entries = service.fetch_contribution_entries(database_id, date, subject, description)
    except Exception as exc:  # noqa: BLE001
        _raise_upstream_error(exc)

    return ContributionResponse(entries=entries)


@router.get(
    "/contribution/{database_id}/calendar",
    response_model=CalendarGrid,
    summary="コントリビューションカレンダーのグリッドを取得",
)
def get_contribution_calendar(
    database_id: str,
    date: Optional[str] = Query(None, description="日付プロパティ名"),
    subject: Optional[str] = Query(None, description="件名プロパティ名"),
    description: Optional[str] = Query(None, description="説明プロパティ名"),
    mode: Optional[CalendarMode] = Query(None, description="trailing52 / calendarYear"),
    service: NotionService = Depends(get_notion_service),
    settings: ChartSettings = Depends(get_chart_settings),
) -> CalendarGrid:
    """
    エントリを取得してカレンダーグリッドを構築する。

    mode 省略時は CHARTS_CALENDAR_MODE（デフォルト trailing52）を使う。
    """
    _require(date=date, subject=subject, description=description)
    _validate_database_id(database_id)

    try:
        entries = service.fetch_contribution_entries(database_id, date, subject, description)
    except Exception as exc:  # noqa: BLE001
        _raise_upstream_error(exc)

    return build_calendar(entries, mode or settings.calendar_mode, tz=settings.timezone)


@router.get(
    "/{database_id}",
    response_model=ChartDataResponse,
    response_model_exclude_none=True,
    summary="チャート用に集計したデータを取得",
)
def get_chart_data(
    database_id: str,
    x: Optional[str] = Query(None, description="X 軸 / ラベルに使うプロパティ名"),
    y: Optional[str] = Query(None, description="Y 軸 / 値に使うプロパティ名（省略時は件数）"),
    agg: Optional[str] = Query(None, description="sum / count / average"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    manual_order: Optional[str] = Query(None, alias="manualOrder"),
    excluded: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="最大件数（整数、0 以下は無制限）"),
    palette: Optional[str] = Query(None, description="パレット名（custom のときは colors を使う）"),
    colors: Optional[str] = Query(None, description="カンマ区切りの色リスト"),
    cat_colors: Optional[str] = Query(None, alias="catColors"),
    service: NotionService = Depends(get_notion_service),
) -> ChartDataResponse:
    """
    レコードを集約し、除外・並び替え・件数制限・色付けを適用して返す。

    - y 指定あり: aggregate（agg 未指定・未知なら sum）
    - y 指定なし: x の値ごとの件数
    """
    _require(x=x)
    _validate_database_id(database_id)

    try:
        options = PostProcessOptions(
            excluded=_split_list(excluded),
            sort_by=sort_by or "none",
            sort_order=sort_order,
            manual_order=_split_list(manual_order),
            limit=limit or None,
        )
    except ValidationError as exc:
        raise _bad_request(f"Invalid post-processing options: {exc.errors()[0]['msg']}") from exc
    category_colors = _parse_category_colors(cat_colors)

    try:
        records = service.fetch_all_records(database_id)
    except Exception as exc:  # noqa: BLE001
        _raise_upstream_error(exc)

    if not records:
        return ChartDataResponse(data=[], count=0, title="No data found")

    data: List[ChartDataPoint]
    if y:
        data = aggregate(
            records,
            TransformOptions(x_property=x, y_property=y, aggregation=agg),
        )
    else:
        data = count_by_property(records, x)

    data = post_process(data, options)

    if palette or colors or category_colors:
        custom = _split_list(colors)
        chosen = get_palette("custom" if custom and not palette else palette, custom)
        data = resolve_colors(data, chosen, category_colors)

    return ChartDataResponse(data=data, count=len(records))
