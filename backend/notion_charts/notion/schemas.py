# backend/notion_charts/notion/schemas.py

"""
Notion ルーターのレスポンススキーマ定義。
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from notion_charts.charts.schemas import ChartDataPoint, ColoredDataPoint, ContributionEntry


class PropertySchema(BaseModel):
    """
    データベースの 1 プロパティの定義。

    is_* フラグは UI のプロパティ選択で使うヒント。
    """

    name: str = Field(..., description="プロパティ名")
    type: str = Field(..., description="Notion のプロパティ型（number, select など）")
    is_numeric: bool = Field(False, description="number / formula / rollup")
    is_category: bool = Field(False, description="select / multi_select / status / checkbox")
    is_date: bool = Field(False, description="date")
    is_text: bool = Field(False, description="title / rich_text")


class SchemaResponse(BaseModel):
    properties: List[PropertySchema]
    count: int


class ChartDataResponse(BaseModel):
    """
    チャートデータ取得エンドポイントのレスポンス。

    count は集約前のレコード件数。
    """

    data: List[Union[ColoredDataPoint, ChartDataPoint]]
    count: int = Field(..., ge=0, description="取得したレコード件数")
    title: Optional[str] = None


class ContributionResponse(BaseModel):
    entries: List[ContributionEntry]
