# backend/notion_charts/storage/store.py
"""
保存済みチャートのストア。

- SavedChartStore: list / get / create / update / delete の最小インターフェース
- InMemoryChartStore: プロセス内のリストに保持する実装
- JsonFileChartStore: 全件を 1 つの JSON ファイルに書き出す実装

書き込みは単一プロセス・単一ライターを前提とする。
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol

from .schemas import SavedChart, SavedChartCreate, SavedChartUpdate

logger = logging.getLogger(__name__)

DEFAULT_CHART_NAME = "Untitled"


class SavedChartStore(Protocol):
    """保存済みチャートのストアの最小インターフェース。"""

    def list_charts(self) -> List[SavedChart]:  # pragma: no cover - Protocol
        ...

    def get_chart(self, chart_id: str) -> Optional[SavedChart]:  # pragma: no cover - Protocol
        ...

    def create_chart(self, data: SavedChartCreate) -> SavedChart:  # pragma: no cover - Protocol
        ...

    def update_chart(
        self, chart_id: str, updates: SavedChartUpdate
    ) -> Optional[SavedChart]:  # pragma: no cover - Protocol
        ...

    def delete_chart(self, chart_id: str) -> bool:  # pragma: no cover - Protocol
        ...


class InMemoryChartStore:
    """
    チャート一覧をメモリ上のリストとして保持するストア。

    永続化が必要な場合は _load / _save をオーバーライドする（JsonFileChartStore）。
    """

    def __init__(self) -> None:
        self._charts: List[SavedChart] = []

    def _load(self) -> List[SavedChart]:
        return list(self._charts)

    def _save(self, charts: List[SavedChart]) -> None:
        self._charts = list(charts)

    def list_charts(self) -> List[SavedChart]:
        return self._load()

    def get_chart(self, chart_id: str) -> Optional[SavedChart]:
        return next((c for c in self._load() if c.id == chart_id), None)

    def create_chart(self, data: SavedChartCreate) -> SavedChart:
        """
        新しい ID と作成時刻を付与して保存する。

        name が空の場合は config.title、それも空なら既定名を使う。
        """
        now = datetime.now(timezone.utc)
        chart = SavedChart(
            id=str(uuid.uuid4()),
            name=data.name or data.config.title or DEFAULT_CHART_NAME,
            created_at=now,
            updated_at=now,
            embed_url=data.embed_url,
            config=data.config,
            advanced=data.advanced,
        )
        charts = self._load()
        charts.append(chart)
        self._save(charts)
        logger.info("Saved chart %s (%s)", chart.id, chart.name)
        return chart

    def update_chart(self, chart_id: str, updates: SavedChartUpdate) -> Optional[SavedChart]:
        """
        指定 ID のチャートを部分更新する。存在しなければ None。

        id / created_at は変更せず、updated_at を現在時刻にする。
        """
        charts = self._load()
        for index, chart in enumerate(charts):
            if chart.id != chart_id:
                continue
            changes = {
                key: value
                for key, value in updates.model_dump(exclude_unset=True).items()
                if value is not None
            }
            merged = chart.model_dump()
            merged.update(changes)
            merged["updated_at"] = datetime.now(timezone.utc)
            charts[index] = SavedChart.model_validate(merged)
            self._save(charts)
            return charts[index]
        return None

    def delete_chart(self, chart_id: str) -> bool:
        charts = self._load()
        remaining = [c for c in charts if c.id != chart_id]
        if len(remaining) == len(charts):
            return False
        self._save(remaining)
        logger.info("Deleted chart %s", chart_id)
        return True


class JsonFileChartStore(InMemoryChartStore):
    """
    チャート一覧を JSON ファイルに保存するストア。

    ファイルが存在しない場合は空の一覧として扱う。
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[SavedChart]:
        if not self._path.exists():
            return []
        raw = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        if not isinstance(raw, list):
            raise ValueError(f"Saved chart file {self._path} does not contain a list.")
        return [SavedChart.model_validate(item) for item in raw]

    def _save(self, charts: List[SavedChart]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [chart.model_dump(mode="json") for chart in charts]
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)
