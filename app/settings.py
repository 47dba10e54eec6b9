import os
from typing import List
from pydantic import BaseModel
from functools import lru_cache
from dotenv import load_dotenv
load_dotenv()


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "Resume Review Service")
    ENV: str = os.getenv("ENV", "development")
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "storage")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SQLITE_PATH: str = os.getenv("SQLITE_PATH", "app.sqlite3")
    API_KEY: str | None = os.getenv("API_KEY") or None
    OPENROUTER_API_KEY: str | None = os.getenv("OPENROUTER_API_KEY") or None
    OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    OPENROUTER_MODEL: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-4.1-nano")
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    LLM_MAX_ATTEMPTS: int = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))
    UPLOAD_TIMEOUT_SECONDS: float = float(os.getenv("UPLOAD_TIMEOUT_SECONDS", "30"))
    FALLBACK_NOTICE_SECONDS: float = float(os.getenv("FALLBACK_NOTICE_SECONDS", "1.5"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))
    MAX_TRACKED_RUNS: int = int(os.getenv("MAX_TRACKED_RUNS", "200"))
    MAX_SESSIONS: int = int(os.getenv("MAX_SESSIONS", "500"))
    ANALYSIS_PROVIDERS: List[str] = _csv(os.getenv(
        "ANALYSIS_PROVIDERS", "gpt-4.1-nano,anthropic/claude-sonnet-4,openai/gpt-4o-mini"))
    CHAT_PROVIDERS: List[str] = _csv(os.getenv(
        "CHAT_PROVIDERS",
        "gpt-4.1-nano,anthropic/claude-sonnet-4,anthropic/claude-3.5-sonnet,"
        "openai/gpt-4o,openai/gpt-4o-mini,google/gemini-2.5-flash"))

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
