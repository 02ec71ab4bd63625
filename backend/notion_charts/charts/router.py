# backend/notion_charts/charts/router.py

"""
チャート設定まわりの FastAPI ルーター定義。

- POST /api/charts/embed-url
"""

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from .embed import build_embed_url
from .schemas import AdvancedOptions, ChartConfig

router = APIRouter(prefix="/api/charts", tags=["charts"])


class EmbedUrlRequest(BaseModel):
    config: ChartConfig
    advanced: AdvancedOptions = Field(default_factory=AdvancedOptions)
    base_url: Optional[str] = Field(
        None,
        description="埋め込み URL のオリジン。省略時はリクエストのベース URL を使う。",
    )


class EmbedUrlResponse(BaseModel):
    embed_url: str


@router.post("/embed-url", response_model=EmbedUrlResponse, summary="埋め込み URL を生成")
def create_embed_url(body: EmbedUrlRequest, request: Request) -> EmbedUrlResponse:
    base_url = body.base_url or str(request.base_url)
    return EmbedUrlResponse(embed_url=build_embed_url(base_url, body.config, body.advanced))
