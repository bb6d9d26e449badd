# app/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from agents.keyword_generator_agent import KeywordGenerator
from app.api.routes import router as api_router
from app.config import Settings, get_settings
from app.shell import ResearchSession, KeywordSource
from services.llm_client import build_openai_client

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    # uvicorn などが既にハンドラを付けていれば触らない
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())


def create_app(
    settings: Optional[Settings] = None,
    generator: Optional[KeywordSource] = None,
) -> FastAPI:
    """
    アプリを組み立てる。

    OpenAI クライアントはここで1回だけ作り、KeywordGenerator に渡す。
    テストでは generator を差し替えて渡す。
    """
    settings = settings or get_settings()
    _configure_logging(settings.log_level)

    if generator is None:
        generator = KeywordGenerator(
            client=build_openai_client(settings.openai_api_key),
            model=settings.openai_model,
            temperature=settings.keyword_temperature,
            target_count=settings.keyword_target_count,
        )

    app = FastAPI(title="Keyword Genius")
    app.state.session = ResearchSession(generator)
    app.include_router(api_router, prefix="/api")
    return app
