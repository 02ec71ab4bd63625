# backend/notion_charts/charts/schemas.py
"""
チャート変換パイプラインの入出力スキーマ定義。

- ChartDataPoint: 集計済みの 1 データ点（name / value）
- TransformOptions / PostProcessOptions: 変換・後処理の設定
- ContributionEntry / CalendarGrid: コントリビューションカレンダーの入出力
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Aggregation(str, Enum):
    """同じ X 値を持つレコードの Y 値の集約方法。"""

    SUM = "sum"
    COUNT = "count"
    AVERAGE = "average"


class Granularity(str, Enum):
    """時系列バケットの粒度。"""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class SortBy(str, Enum):
    """後処理の並び替えキー。"""

    NONE = "none"
    X = "x"
    Y = "y"
    MANUAL = "manual"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    CONTRIBUTION = "contribution"


class ChartDataPoint(BaseModel):
    """
    チャート描画用の 1 データ点。

    name はグルーピングキーの文字列表現、value は集約後の数値。
    """

    name: str = Field(..., description="グルーピングキー（X 値の文字列表現）")
    value: Union[int, float] = Field(..., description="集約後の数値")


class ColoredDataPoint(ChartDataPoint):
    """色が割り当て済みのデータ点。"""

    color: str = Field(..., description="描画色（#rrggbb など）")


class TransformOptions(BaseModel):
    x_property: str = Field(..., description="X 軸 / ラベルに使うプロパティ名")
    y_property: str = Field(..., description="Y 軸 / 値に使うプロパティ名")
    aggregation: Aggregation = Field(Aggregation.SUM, description="集約方法")

    @field_validator("aggregation", mode="before")
    @classmethod
    def default_unknown_aggregation(cls, v: object) -> object:
        """未設定・未知の集約方法は sum として扱う。"""
        if v is None or v == "":
            return Aggregation.SUM
        if isinstance(v, str) and v not in {a.value for a in Aggregation}:
            return Aggregation.SUM
        return v


class PostProcessOptions(BaseModel):
    """
    集約済みデータ点に対する除外・並び替え・件数制限の設定。

    sort_order は必須項目。呼び出し箇所ごとに暗黙のデフォルトが
    食い違わないよう、呼び出し側で明示する。
    """

    excluded: List[str] = Field(default_factory=list, description="除外するカテゴリ名")
    sort_by: SortBy = Field(SortBy.NONE, description="並び替えキー")
    sort_order: SortOrder = Field(..., description="昇順 / 降順")
    manual_order: List[str] = Field(
        default_factory=list,
        description="sort_by=manual のときの並び順。含まれない名前は末尾に回る。",
    )
    limit: Optional[int] = Field(
        None,
        description="正の値のとき、並び替え後の先頭 limit 件に切り詰める。",
    )


class ContributionEntry(BaseModel):
    """コントリビューションカレンダーの 1 エントリ。同じ日付に複数あってよい。"""

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    subject: str = ""
    description: str = ""


class CalendarMode(str, Enum):
    """
    カレンダーの表示範囲。

    - TRAILING_52: 今日を含む直近 52 週（+ 今週）
    - CALENDAR_YEAR: 今年の 1/1〜12/31 を含む週
    """

    TRAILING_52 = "trailing52"
    CALENDAR_YEAR = "calendarYear"


class IntensityLevel(str, Enum):
    EMPTY = "empty"
    LEVEL1 = "level1"
    LEVEL2 = "level2"
    LEVEL3 = "level3"
    LEVEL4 = "level4"


class CalendarCell(BaseModel):
    """
    カレンダーの 1 日分のセル。

    詳細表示（subject / description）はその日の最初のエントリを使い、
    強度（level）は件数で決まる。
    """

    date: str = Field(..., description="YYYY-MM-DD")
    count: int = Field(0, ge=0)
    level: IntensityLevel = IntensityLevel.EMPTY
    in_year: bool = Field(
        True,
        description="表示範囲内の日か。週を埋めるためだけのパディング日は False。",
    )
    is_today: bool = False
    subject: Optional[str] = None
    description: Optional[str] = None


class MonthLabel(BaseModel):
    label: str
    col: int = Field(..., ge=0, description="ラベルを置く週のインデックス")


class CalendarGrid(BaseModel):
    """
    build_calendar の結果。weeks の各要素は常に 7 セル（日曜始まり）。
    """

    mode: CalendarMode
    year: Optional[int] = Field(None, description="CALENDAR_YEAR のときの対象年")
    start: date
    end: date
    weeks: List[List[CalendarCell]]
    month_labels: List[MonthLabel]
    total_contributions: int = Field(..., ge=0)


class ChartConfig(BaseModel):
    """
    保存・埋め込み用のチャート設定。

    contribution の場合は date / subject / description の各プロパティを使い、
    それ以外のチャートでは x / y / aggregation を使う。
    """

    database_id: str = Field(..., description="Notion データベース ID")
    chart_type: ChartType = ChartType.BAR
    x_property: str = ""
    y_property: str = ""
    aggregation: Aggregation = Aggregation.COUNT
    title: str = ""
    date_property: str = ""
    subject_property: str = ""
    description_property: str = ""


class AdvancedOptions(BaseModel):
    """
    チャートの詳細オプション。

    データに影響する項目（除外・並び替え・件数・色）だけを型付きで持ち、
    表示用の項目（凡例・フォントサイズ等）はそのまま保持する。
    """

    model_config = ConfigDict(extra="allow")

    color_palette: str = "indigo"
    custom_colors: List[str] = Field(default_factory=list)
    sort_by: SortBy = SortBy.NONE
    sort_order: SortOrder = SortOrder.DESC
    limit_results: int = Field(0, ge=0)
    manual_order: List[str] = Field(default_factory=list)
    excluded_categories: List[str] = Field(default_factory=list)
    category_colors: Dict[str, str] = Field(default_factory=dict)

    def to_post_process_options(self) -> PostProcessOptions:
        return PostProcessOptions(
            excluded=self.excluded_categories,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            manual_order=self.manual_order,
            limit=self.limit_results or None,
        )
