# backend/notion_charts/charts/post_processing.py
"""
集約済みデータ点の後処理。

処理順は固定:
1. excluded に含まれるカテゴリを除外
2. 並び替え（x / y / manual、安定ソート）
3. limit 件に切り詰め

あわせて、描画色の割り当て（カテゴリ個別指定 > パレット循環）もここで行う。
"""

import math
import re
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .schemas import ChartDataPoint, ColoredDataPoint, PostProcessOptions, SortBy, SortOrder

_ISO_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")

DEFAULT_PALETTE = "indigo"
CUSTOM_PALETTE = "custom"

PALETTES: Dict[str, List[str]] = {
    "indigo": ["#6366f1", "#8b5cf6", "#a855f7", "#d946ef", "#ec4899", "#f43f5e"],
    "ocean": ["#0ea5e9", "#06b6d4", "#14b8a6", "#10b981", "#22c55e", "#84cc16"],
    "sunset": ["#f97316", "#fb923c", "#fbbf24", "#facc15", "#a3e635", "#4ade80"],
    "berry": ["#e11d48", "#db2777", "#c026d3", "#9333ea", "#7c3aed", "#6366f1"],
    "earth": ["#78716c", "#a8a29e", "#d6d3d1", "#fbbf24", "#f59e0b", "#d97706"],
    "mono": ["#1f2937", "#374151", "#4b5563", "#6b7280", "#9ca3af", "#d1d5db"],
    "rainbow": ["#ef4444", "#f97316", "#eab308", "#22c55e", "#3b82f6", "#8b5cf6"],
    "pastel": ["#fda4af", "#fdba74", "#fde047", "#86efac", "#7dd3fc", "#c4b5fd"],
}

SortValue = Union[str, int, float]


def _timestamp(value: str) -> Optional[float]:
    """
    YYYY-MM-DD で始まる文字列をタイムスタンプに変換する。

    オフセットなしの値は UTC とみなす。パースできなければ None。
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _as_number(value: SortValue) -> Optional[float]:
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _compare_values(a: SortValue, b: SortValue, sort_by: SortBy) -> int:
    """
    2 つの値を比較する（昇順の向き）。

    - 両方が ISO 日付で始まる文字列なら日時として比較
    - x の場合、両方が数値として解釈できれば数値として比較
    - それ以外はそのままの値で比較
    比較不能（日付のパース失敗など）の場合は等しいとみなす。
    """
    if (
        isinstance(a, str)
        and isinstance(b, str)
        and _ISO_DATE_PREFIX_RE.match(a)
        and _ISO_DATE_PREFIX_RE.match(b)
    ):
        ts_a, ts_b = _timestamp(a), _timestamp(b)
        if ts_a is None or ts_b is None:
            return 0
        a, b = ts_a, ts_b
    elif sort_by == SortBy.X:
        num_a, num_b = _as_number(a), _as_number(b)
        if num_a is not None and num_b is not None:
            a, b = num_a, num_b

    if type(a) is not type(b) and not (
        isinstance(a, (int, float)) and isinstance(b, (int, float))
    ):
        a, b = str(a), str(b)

    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _sort_points(
    points: List[ChartDataPoint],
    sort_by: SortBy,
    sort_order: SortOrder,
    manual_order: Sequence[str],
) -> List[ChartDataPoint]:
    if sort_by == SortBy.MANUAL:
        ranks: Dict[str, int] = {}
        for index, name in enumerate(manual_order):
            ranks.setdefault(name, index)
        unseen = len(manual_order) + 1
        return sorted(points, key=lambda p: ranks.get(p.name, unseen))

    if sort_by in (SortBy.X, SortBy.Y):
        direction = 1 if sort_order == SortOrder.ASC else -1

        def compare(p: ChartDataPoint, q: ChartDataPoint) -> int:
            if sort_by == SortBy.X:
                return direction * _compare_values(p.name, q.name, sort_by)
            return direction * _compare_values(p.value, q.value, sort_by)

        return sorted(points, key=cmp_to_key(compare))

    return list(points)


def post_process(
    points: Sequence[ChartDataPoint],
    options: PostProcessOptions,
) -> List[ChartDataPoint]:
    """
    除外 → 並び替え → 件数制限 の順で後処理したデータ点を返す。

    入力は変更しない。同じオプションで自身の出力に再適用しても結果は変わらない。
    """
    excluded = set(options.excluded)
    result = [point for point in points if point.name not in excluded]

    result = _sort_points(result, options.sort_by, options.sort_order, options.manual_order)

    if options.limit is not None and options.limit > 0:
        result = result[: options.limit]

    return result


def get_palette(name: Optional[str], custom: Optional[Sequence[str]] = None) -> List[str]:
    """
    パレット名から色リストを返す。

    - "custom" のときは custom をそのまま使う（空なら既定パレット）
    - 未知の名前は既定パレット（indigo）
    """
    if name == CUSTOM_PALETTE and custom:
        return list(custom)
    return list(PALETTES.get(name or DEFAULT_PALETTE, PALETTES[DEFAULT_PALETTE]))


def resolve_colors(
    points: Sequence[ChartDataPoint],
    palette: Sequence[str],
    category_colors: Optional[Mapping[str, str]] = None,
) -> List[ColoredDataPoint]:
    """
    各データ点に色を割り当てる。

    カテゴリ個別の指定があればそれを、なければ palette[i % len(palette)] を使う。
    同じ入力には常に同じ割り当てを返す。
    """
    if not palette:
        raise ValueError("palette must contain at least one color.")

    overrides = category_colors or {}
    return [
        ColoredDataPoint(
            name=point.name,
            value=point.value,
            color=overrides.get(point.name) or palette[index % len(palette)],
        )
        for index, point in enumerate(points)
    ]
