# backend/notion_charts/charts/calendar.py
"""
GitHub 風コントリビューションカレンダーのグリッド構築。

2 種類の表示範囲をサポートする:
- trailing52: 今日を含む週と、その前の 52 週
- calendarYear: 今年の 1/1 を含む週から 12/31 を含む週まで

どちらも日曜始まりの 7 日単位の週に区切り、各日の件数から強度を決める。
同じ日付に複数エントリがある場合、件数は強度に使い、詳細表示には最初のエントリを使う。
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from .schemas import (
    CalendarCell,
    CalendarGrid,
    CalendarMode,
    ContributionEntry,
    IntensityLevel,
    MonthLabel,
)
from .transformers import week_start

MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

TRAILING_WEEKS = 52

_LEVELS = [
    IntensityLevel.EMPTY,
    IntensityLevel.LEVEL1,
    IntensityLevel.LEVEL2,
    IntensityLevel.LEVEL3,
    IntensityLevel.LEVEL4,
]


def intensity_level(count: int) -> IntensityLevel:
    """件数を 5 段階（0, 1, 2, 3, 4 以上）の強度に変換する。"""
    return _LEVELS[max(0, min(count, len(_LEVELS) - 1))]


def _group_by_date(entries: Iterable[ContributionEntry]) -> Dict[str, List[ContributionEntry]]:
    by_date: Dict[str, List[ContributionEntry]] = {}
    for entry in entries:
        by_date.setdefault(entry.date, []).append(entry)
    return by_date


def build_calendar(
    entries: Iterable[ContributionEntry],
    mode: CalendarMode = CalendarMode.TRAILING_52,
    *,
    today: Optional[date] = None,
    tz: tzinfo = timezone.utc,
) -> CalendarGrid:
    """
    エントリ一覧からカレンダーグリッドを構築する。

    :param entries: コントリビューションエントリ（date は YYYY-MM-DD）
    :param mode: 表示範囲
    :param today: 基準日。省略時は tz における現在日付
    :param tz: today を決める基準タイムゾーン
    """
    entries = list(entries)
    if today is None:
        today = datetime.now(tz).date()

    by_date = _group_by_date(entries)
    today_key = today.isoformat()

    if mode == CalendarMode.CALENDAR_YEAR:
        year: Optional[int] = today.year
        first_day = date(today.year, 1, 1)
        last_day = date(today.year, 12, 31)
        start = week_start(first_day)
        total = sum(1 for entry in entries if entry.date.startswith(f"{today.year:04d}-"))
    else:
        year = None
        first_day = week_start(today) - timedelta(weeks=TRAILING_WEEKS)
        last_day = today
        start = first_day
        total = len(entries)

    # 最終週も 7 日になるよう土曜日まで埋める
    end = week_start(last_day) + timedelta(days=6)

    weeks: List[List[CalendarCell]] = []
    month_labels: List[MonthLabel] = []
    last_month: Optional[int] = None

    day = start
    while day <= end:
        if not weeks or len(weeks[-1]) == 7:
            weeks.append([])
        col = len(weeks) - 1

        key = day.isoformat()
        in_range = first_day <= day <= last_day

        if in_range:
            day_entries = by_date.get(key, [])
            first = day_entries[0] if day_entries else None
            cell = CalendarCell(
                date=key,
                count=len(day_entries),
                level=intensity_level(len(day_entries)),
                in_year=True,
                is_today=key == today_key,
                subject=first.subject if first else None,
                description=first.description if first else None,
            )
            if day.month != last_month:
                month_labels.append(MonthLabel(label=MONTH_LABELS[day.month - 1], col=col))
                last_month = day.month
        else:
            cell = CalendarCell(
                date=key,
                count=0,
                level=IntensityLevel.EMPTY,
                in_year=False,
                is_today=key == today_key,
            )

        weeks[col].append(cell)
        day += timedelta(days=1)

    return CalendarGrid(
        mode=mode,
        year=year,
        start=start,
        end=end,
        weeks=weeks,
        month_labels=month_labels,
        total_contributions=total,
    )
