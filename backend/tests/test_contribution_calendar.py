# backend/tests/test_contribution_calendar.py

from datetime import date

import pytest

from notion_charts.charts.calendar import build_calendar, intensity_level
from notion_charts.charts.schemas import CalendarMode, ContributionEntry, IntensityLevel


def _entry(day: str, subject: str = "work", description: str = "") -> ContributionEntry:
    return ContributionEntry(date=day, subject=subject, description=description)


def _cells(grid):
    return [cell for week in grid.weeks for cell in week]


def _cell(grid, day: str):
    return next(cell for cell in _cells(grid) if cell.date == day)


@pytest.mark.parametrize("mode", [CalendarMode.TRAILING_52, CalendarMode.CALENDAR_YEAR])
@pytest.mark.parametrize("today", [date(2024, 10, 19), date(2024, 10, 16), date(2023, 1, 1)])
def test_grid_weeks_have_seven_days_starting_on_sunday(mode, today):
    grid = build_calendar([], mode, today=today)

    assert all(len(week) == 7 for week in grid.weeks)
    assert date.fromisoformat(grid.weeks[0][0].date).weekday() == 6
    assert date.fromisoformat(grid.weeks[-1][-1].date).weekday() == 5


def test_calendar_year_single_entry_is_level1_and_rest_empty():
    grid = build_calendar(
        [_entry("2024-07-04")],
        CalendarMode.CALENDAR_YEAR,
        today=date(2024, 10, 19),
    )

    assert grid.year == 2024
    assert grid.start == date(2023, 12, 31)
    assert grid.end == date(2025, 1, 4)
    assert len(grid.weeks) == 53

    in_year = [cell for cell in _cells(grid) if cell.in_year]
    assert len(in_year) == 366
    assert _cell(grid, "2024-07-04").level == IntensityLevel.LEVEL1
    assert all(
        cell.level == IntensityLevel.EMPTY for cell in in_year if cell.date != "2024-07-04"
    )


def test_calendar_year_padding_days_are_empty_and_not_counted():
    entries = [_entry("2023-12-31"), _entry("2024-01-01"), _entry("2025-01-01")]

    grid = build_calendar(entries, CalendarMode.CALENDAR_YEAR, today=date(2024, 10, 19))

    padding = _cell(grid, "2023-12-31")
    assert padding.in_year is False
    assert padding.level == IntensityLevel.EMPTY
    assert padding.count == 0
    assert _cell(grid, "2025-01-01").in_year is False
    assert grid.total_contributions == 1


def test_calendar_year_month_labels_only_for_in_year_days():
    grid = build_calendar([], CalendarMode.CALENDAR_YEAR, today=date(2024, 3, 1))

    labels = [(m.label, m.col) for m in grid.month_labels]
    assert len(labels) == 12
    assert labels[0] == ("Jan", 0)
    assert labels[-1][0] == "Dec"
    # 2024-02-01 は 1/1 を含む週から数えて 5 週目（インデックス 4）
    assert labels[1] == ("Feb", 4)


def test_trailing52_window_ends_today_and_counts_all_entries():
    today = date(2024, 10, 16)
    entries = [_entry("2020-01-01"), _entry("2024-10-16"), _entry("2024-10-01")]

    grid = build_calendar(entries, CalendarMode.TRAILING_52, today=today)

    assert grid.year is None
    assert grid.start == date(2023, 10, 15)
    assert grid.end == date(2024, 10, 19)
    assert len(grid.weeks) == 53
    assert grid.total_contributions == 3

    today_cell = _cell(grid, "2024-10-16")
    assert today_cell.is_today is True
    assert today_cell.level == IntensityLevel.LEVEL1
    assert [c.in_year for c in grid.weeks[-1][-3:]] == [False, False, False]
    assert sum(1 for c in _cells(grid) if c.is_today) == 1


def test_trailing52_first_month_label_is_at_column_zero():
    grid = build_calendar([], CalendarMode.TRAILING_52, today=date(2024, 10, 19))

    assert grid.month_labels[0].label == "Oct"
    assert grid.month_labels[0].col == 0
    assert grid.month_labels[-1].label == "Oct"


def test_multiple_entries_per_day_first_entry_wins_for_detail():
    entries = [
        _entry("2024-05-05", "first", "one"),
        _entry("2024-05-05", "second", "two"),
        _entry("2024-05-05", "third", "three"),
    ]

    grid = build_calendar(entries, CalendarMode.TRAILING_52, today=date(2024, 10, 19))
    cell = _cell(grid, "2024-05-05")

    assert cell.count == 3
    assert cell.level == IntensityLevel.LEVEL3
    assert cell.subject == "first"
    assert cell.description == "one"


@pytest.mark.parametrize(
    "count, level",
    [
        (0, IntensityLevel.EMPTY),
        (1, IntensityLevel.LEVEL1),
        (2, IntensityLevel.LEVEL2),
        (3, IntensityLevel.LEVEL3),
        (4, IntensityLevel.LEVEL4),
        (12, IntensityLevel.LEVEL4),
    ],
)
def test_intensity_level_buckets(count, level):
    assert intensity_level(count) == level
