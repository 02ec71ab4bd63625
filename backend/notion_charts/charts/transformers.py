# backend/notion_charts/charts/transformers.py
"""
Notion レコード群をチャート用データ点に変換する集計ロジック。

- aggregate: X 値でグルーピングし、Y 値を sum / count / average で集約
- count_by_property: 1 プロパティの値ごとの件数
- bucket_time_series: 日付プロパティを日 / 週 / 月のバケットにまとめて合計

どの関数も純粋関数で、レコード単位の不正データでは例外を投げない。
グループの並びは「最初に出現した順」を連番で明示的に保持する。
"""

import logging
import math
import re
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from notion_charts.notion.properties import ScalarValue, get_property_value

from .schemas import Aggregation, ChartDataPoint, Granularity, TransformOptions

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CENT = Decimal("0.01")
# これ以上の絶対値では float に小数第 2 位の精度がない
_EXACT_LIMIT = 2**53


@dataclass
class _Group:
    """グループの初出順と、そのグループに属する数値のリスト。"""

    seq: int
    values: List[float] = field(default_factory=list)


def _is_finite(value: float) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # float に収まらない巨大な int
        return False


def _to_number(value: Optional[ScalarValue]) -> Optional[float]:
    """
    数値として扱える値だけを返す。bool や文字列、非有限値、float に収まらない int は None。
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not _is_finite(value):
        return None
    return value


def _bounded(value: float, name: str) -> float:
    """
    合計が float の範囲を超えた場合は、同じ符号の最大有限値に丸める。
    """
    if _is_finite(value):
        return value
    logger.warning("Sum for %r overflowed; clamping to the largest finite value", name)
    return -sys.float_info.max if value < 0 else sys.float_info.max


def _round2(value: float) -> float:
    """小数第 2 位に丸める（0.005 は切り上げ方向）。"""
    if abs(value) >= _EXACT_LIMIT:
        return value
    rounded = Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    result = float(rounded)
    return int(result) if result.is_integer() else result


def _ordered(groups: Dict[str, _Group]) -> List[tuple]:
    return sorted(groups.items(), key=lambda item: item[1].seq)


def aggregate(records: Iterable[Record], options: TransformOptions) -> List[ChartDataPoint]:
    """
    X プロパティの値でレコードをグルーピングし、Y プロパティの値を集約する。

    - X が None のレコードはスキップ
    - Y が None / 数値以外の場合は 0 として扱う（average の分母にも含める）
    - float に収まらない int の Y も数値以外とみなす
    - 合計が float の範囲を超えたら同じ符号の最大有限値に丸める
    - count は Y を見ずに件数を返す
    - 結果は小数第 2 位に丸め、X の初出順で返す
    """
    groups: Dict[str, _Group] = {}

    for record in records:
        x_value = get_property_value(record, options.x_property)
        if x_value is None:
            continue

        key = _to_key(x_value)
        y_number = _to_number(get_property_value(record, options.y_property))

        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(seq=len(groups))
        group.values.append(y_number if y_number is not None else 0)

    result: List[ChartDataPoint] = []
    for name, group in _ordered(groups):
        values = group.values
        if options.aggregation == Aggregation.COUNT:
            value: float = len(values)
        elif options.aggregation == Aggregation.AVERAGE:
            total = sum(values)
            if _is_finite(total):
                value = total / len(values)
            else:
                value = _bounded(sum(v / len(values) for v in values), name)
        else:
            value = _bounded(sum(values), name)
        result.append(ChartDataPoint(name=name, value=_round2(value)))

    return result


def count_by_property(records: Iterable[Record], property_name: str) -> List[ChartDataPoint]:
    """
    指定プロパティの値ごとにレコード件数を数える。None の値はスキップ。
    """
    counts: Dict[str, _Group] = {}

    for record in records:
        value = get_property_value(record, property_name)
        if value is None:
            continue

        key = _to_key(value)
        group = counts.get(key)
        if group is None:
            group = counts[key] = _Group(seq=len(counts))
        group.values.append(1)

    return [
        ChartDataPoint(name=name, value=len(group.values))
        for name, group in _ordered(counts)
    ]


def _to_key(value: ScalarValue) -> str:
    """
    グルーピングキーとしての文字列表現。

    bool は true / false、整数値の float は小数点なしで表す。
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_calendar_date(value: str, tz: tzinfo = timezone.utc) -> Optional[date]:
    """
    ISO8601 文字列を基準タイムゾーン tz におけるカレンダー日付に変換する。

    - YYYY-MM-DD のみの場合はそのままの日付
    - オフセット付き日時は tz に変換してから日付を取る
    - オフセットなし日時は tz の時刻とみなす
    - パースできない場合は None
    """
    text = value.strip()
    try:
        if _DATE_ONLY_RE.match(text):
            return date.fromisoformat(text)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date()


def week_start(day: date) -> date:
    """その日を含む週の日曜日を返す。"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_key(day: date, granularity: Granularity) -> str:
    if granularity == Granularity.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if granularity == Granularity.WEEK:
        return week_start(day).isoformat()
    return day.isoformat()


def bucket_time_series(
    records: Iterable[Record],
    date_property: str,
    value_property: Optional[str],
    granularity: Granularity = Granularity.DAY,
    tz: tzinfo = timezone.utc,
) -> List[ChartDataPoint]:
    """
    日付プロパティでレコードをバケットにまとめ、値プロパティを合計する。

    - 日付が None / 文字列以外 / パース不能のレコードはスキップ
    - 値が None / 数値以外の場合は 1 として数える（aggregate の 0 とは異なる）
    - 結果はバケットキーの昇順（ゼロ埋め書式なので文字列比較で時系列順になる）
    """
    buckets: Dict[str, float] = {}

    for record in records:
        raw_date = get_property_value(record, date_property)
        if not isinstance(raw_date, str):
            continue

        day = parse_calendar_date(raw_date, tz)
        if day is None:
            logger.debug("Skipping unparseable date value %r", raw_date)
            continue

        key = bucket_key(day, granularity)
        number = (
            _to_number(get_property_value(record, value_property))
            if value_property
            else None
        )
        buckets[key] = buckets.get(key, 0) + (number if number is not None else 1)

    return [
        ChartDataPoint(name=key, value=_bounded(buckets[key], key))
        for key in sorted(buckets)
    ]
