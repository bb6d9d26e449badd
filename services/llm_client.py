# services/llm_client.py
from openai import OpenAI


def build_openai_client(api_key: str | None) -> OpenAI:
    """
    OpenAI クライアントを1つ生成する。
    プロセス起動時（create_app）に1回だけ呼び、生成したものを KeywordGenerator に渡す。
    """
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY が設定されていません")
    return OpenAI(api_key=api_key)
