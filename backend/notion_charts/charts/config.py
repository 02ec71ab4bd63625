# backend/notion_charts/charts/config.py

"""
チャート変換まわりの設定値読み出しモジュール。

- 日付バケット・カレンダーの「今日」を決める基準タイムゾーン
- コントリビューションカレンダーのデフォルト表示範囲
"""

from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notion_charts.utils.config import get_env

from .schemas import CalendarMode


@dataclass(frozen=True)
class ChartSettings:
    """チャート変換に関する設定値のまとまり。"""

    timezone: tzinfo
    calendar_mode: CalendarMode


def get_chart_settings() -> ChartSettings:
    """
    ChartSettings を構築して返す。

    任意:
      - CHARTS_TIMEZONE      (デフォルト: UTC)
      - CHARTS_CALENDAR_MODE (デフォルト: trailing52)

    ホストのローカルタイムゾーンには依存させず、未設定なら UTC を使う。
    """
    tz_name = get_env("CHARTS_TIMEZONE", default="UTC", required=False)
    try:
        timezone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(
            f"Invalid timezone for env var CHARTS_TIMEZONE: {tz_name!r}"
        ) from exc

    raw_mode = get_env(
        "CHARTS_CALENDAR_MODE",
        default=CalendarMode.TRAILING_52.value,
        required=False,
    )
    try:
        calendar_mode = CalendarMode(raw_mode)
    except ValueError as exc:
        raise RuntimeError(
            f"Invalid calendar mode for env var CHARTS_CALENDAR_MODE: {raw_mode!r}"
        ) from exc

    return ChartSettings(timezone=timezone, calendar_mode=calendar_mode)
