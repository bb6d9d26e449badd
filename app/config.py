# app/config.py

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    """

    # ---------- OpenAI ----------
    # OPENAI_API_KEY=sk-xxxx... を .env に書く想定
    openai_api_key: str | None = None

    # モデル名を変えたい場合は .env に OPENAI_MODEL=gpt-4.1 などと書けば上書きされる
    openai_model: str = "gpt-4.1-mini"

    # ---------- キーワード生成 ----------
    # 類義語などに少し幅を持たせたいので 0.7
    keyword_temperature: float = Field(0.7, ge=0.0, le=2.0)
    # 1回の生成で LLM に要求する件数（保証はされない）
    keyword_target_count: int = Field(100, ge=1)

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()
