"""
チャート変換パイプライン。

- transformers: aggregate / count_by_property / bucket_time_series
- post_processing: post_process / resolve_colors
- calendar: build_calendar
- embed: build_embed_url
"""

from .calendar import build_calendar  # noqa: F401
from .embed import build_embed_url  # noqa: F401
from .post_processing import post_process, resolve_colors  # noqa: F401
from .schemas import (  # noqa: F401
    Aggregation,
    CalendarGrid,
    CalendarMode,
    ChartDataPoint,
    ContributionEntry,
    Granularity,
    PostProcessOptions,
    SortBy,
    SortOrder,
    TransformOptions,
)
from .transformers import aggregate, bucket_time_series, count_by_property  # noqa: F401
