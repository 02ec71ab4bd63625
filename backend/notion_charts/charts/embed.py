# backend/notion_charts/charts/embed.py
"""
埋め込み用チャート URL の組み立て。
"""

import json
from typing import Dict
from urllib.parse import urlencode

from .post_processing import get_palette
from .schemas import AdvancedOptions, ChartConfig, ChartType


def build_embed_url(base_url: str, config: ChartConfig, advanced: AdvancedOptions) -> str:
    """
    チャート設定と詳細オプションから埋め込み URL を組み立てる。

    - 通常チャート: {base_url}/charts/{chart_type}?db=...&x=...
    - contribution: {base_url}/charts/contribution?db=...&date=...
    """
    base = base_url.rstrip("/")

    if config.chart_type == ChartType.CONTRIBUTION:
        params: Dict[str, str] = {
            "db": config.database_id,
            "date": config.date_property,
            "subject": config.subject_property,
            "description": config.description_property,
        }
        if config.title:
            params["title"] = config.title
        return f"{base}/charts/contribution?{urlencode(params)}"

    params = {"db": config.database_id, "x": config.x_property}
    if config.y_property:
        params["y"] = config.y_property
    params["agg"] = config.aggregation.value
    if config.title:
        params["title"] = config.title

    params["colors"] = ",".join(get_palette(advanced.color_palette, advanced.custom_colors))
    params["sortBy"] = advanced.sort_by.value
    params["sortOrder"] = advanced.sort_order.value
    if advanced.limit_results:
        params["limit"] = str(advanced.limit_results)
    params["manualOrder"] = ",".join(advanced.manual_order)
    params["excluded"] = ",".join(advanced.excluded_categories)
    params["catColors"] = json.dumps(advanced.category_colors, separators=(",", ":"))

    return f"{base}/charts/{config.chart_type.value}?{urlencode(params)}"
