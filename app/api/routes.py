# app/api/routes.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from app.shell import SUGGESTED_SEEDS, ResearchSession, SessionSnapshot
from models.keyword_models import SortField, TableView
from services.dashboard import build_dashboard
from services.keyword_table import CSV_FILENAME

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class ResearchRequest(BaseModel):
    seed_keyword: str = Field(..., min_length=1)

    @field_validator("seed_keyword")
    @classmethod
    def _strip_seed(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("seed_keyword must not be blank")
        return value


class TableUpdateRequest(BaseModel):
    search_term: Optional[str] = None
    intent_filter: Optional[str] = None


class SortRequest(BaseModel):
    field: SortField


def _session(request: Request) -> ResearchSession:
    return request.app.state.session


# --------- エンドポイント ---------


@router.get("/research", response_model=SessionSnapshot)
def api_get_research(request: Request) -> SessionSnapshot:
    return _session(request).snapshot()


@router.post("/research", response_model=SessionSnapshot)
def api_submit_research(payload: ResearchRequest, request: Request) -> SessionSnapshot:
    """
    seed_keyword からキーワード一覧を生成する。
    生成失敗は HTTP エラーにせず、status="error" と error メッセージで返す。
    """
    logger.info("[api.research] seed_keyword=%s", payload.seed_keyword)
    return _session(request).submit(payload.seed_keyword)


@router.get("/research/suggestions", response_model=List[str])
def api_suggestions() -> List[str]:
    return list(SUGGESTED_SEEDS)


@router.get("/research/table", response_model=TableView)
def api_get_table(request: Request) -> TableView:
    return _session(request).table().view()


@router.patch("/research/table", response_model=TableView)
def api_update_table(payload: TableUpdateRequest, request: Request) -> TableView:
    table = _session(request).table()
    if payload.search_term is not None:
        table.set_search_term(payload.search_term)
    if payload.intent_filter is not None:
        table.set_intent_filter(payload.intent_filter)
    return table.view()


@router.post("/research/table/sort", response_model=TableView)
def api_sort_table(payload: SortRequest, request: Request) -> TableView:
    """列ヘッダのクリックに相当。"""
    table = _session(request).table()
    table.click_header(payload.field)
    return table.view()


@router.get("/research/table/export")
def api_export_csv(request: Request) -> Response:
    csv_text = _session(request).table().export_csv()
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.get("/research/dashboard")
def api_dashboard(request: Request) -> Dict[str, Any]:
    stats = _session(request).stats()
    if stats is None:
        raise HTTPException(status_code=404, detail="No keyword results to chart yet.")
    return build_dashboard(stats)
