# backend/notion_charts/storage/router.py

"""
保存済みチャートの CRUD エンドポイント。

- GET    /api/charts
- POST   /api/charts
- GET    /api/charts/{chart_id}
- PATCH  /api/charts/{chart_id}
- DELETE /api/charts/{chart_id}
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from .factory import get_chart_store
from .schemas import SavedChart, SavedChartCreate, SavedChartUpdate
from .store import SavedChartStore

router = APIRouter(prefix="/api/charts", tags=["charts"])


def _not_found(chart_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Chart {chart_id} not found.",
    )


@router.get("", response_model=List[SavedChart], summary="保存済みチャート一覧")
def list_charts(store: SavedChartStore = Depends(get_chart_store)) -> List[SavedChart]:
    return store.list_charts()


@router.post(
    "",
    response_model=SavedChart,
    status_code=status.HTTP_201_CREATED,
    summary="チャート設定を保存",
)
def create_chart(
    body: SavedChartCreate,
    store: SavedChartStore = Depends(get_chart_store),
) -> SavedChart:
    return store.create_chart(body)


@router.get("/{chart_id}", response_model=SavedChart, summary="保存済みチャートを取得")
def get_chart(chart_id: str, store: SavedChartStore = Depends(get_chart_store)) -> SavedChart:
    chart = store.get_chart(chart_id)
    if chart is None:
        raise _not_found(chart_id)
    return chart


@router.patch("/{chart_id}", response_model=SavedChart, summary="保存済みチャートを更新")
def update_chart(
    chart_id: str,
    body: SavedChartUpdate,
    store: SavedChartStore = Depends(get_chart_store),
) -> SavedChart:
    chart = store.update_chart(chart_id, body)
    if chart is None:
        raise _not_found(chart_id)
    return chart


@router.delete(
    "/{chart_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="保存済みチャートを削除",
)
def delete_chart(chart_id: str, store: SavedChartStore = Depends(get_chart_store)) -> Response:
    if not store.delete_chart(chart_id):
        raise _not_found(chart_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
