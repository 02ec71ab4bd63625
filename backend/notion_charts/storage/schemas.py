# backend/notion_charts/storage/schemas.py
"""
保存済みチャートのスキーマ定義。
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from notion_charts.charts.schemas import AdvancedOptions, ChartConfig


class SavedChart(BaseModel):
    """
    ローカルに保存されたチャート設定 1 件。

    id / created_at は作成時に決まり、以後変わらない。
    """

    id: str = Field(..., description="生成された一意な ID（uuid4）")
    name: str = Field(..., description="表示名")
    created_at: datetime = Field(..., description="作成時刻（UTC）")
    updated_at: datetime = Field(..., description="最終更新時刻（UTC）")
    embed_url: str = Field("", description="埋め込み用 URL")
    config: ChartConfig
    advanced: AdvancedOptions = Field(default_factory=AdvancedOptions)


class SavedChartCreate(BaseModel):
    name: str = Field("", description="空の場合は config.title か既定名を使う")
    embed_url: str = ""
    config: ChartConfig
    advanced: AdvancedOptions = Field(default_factory=AdvancedOptions)


class SavedChartUpdate(BaseModel):
    """部分更新。指定された項目だけを上書きする。"""

    name: Optional[str] = None
    embed_url: Optional[str] = None
    config: Optional[ChartConfig] = None
    advanced: Optional[AdvancedOptions] = None
