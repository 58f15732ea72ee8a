from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    github_token: Optional[str] = Field(default=None, alias="GITHUB_TOKEN")
    github_base_url: HttpUrl = Field(
        default="https://api.github.com", alias="GITHUB_BASE_URL"
    )
    github_proxy: Optional[str] = Field(default=None, alias="GITHUB_PROXY")
    github_user_agent: str = Field(default="GitHubUsers/1.0", alias="GITHUB_USER_AGENT")
    github_api_version: str = Field(default="2022-11-28", alias="GITHUB_API_VERSION")
    request_timeout_seconds: float = Field(default=30, alias="REQUEST_TIMEOUT_SECONDS")
    per_page: int = Field(default=30, alias="PER_PAGE")

    cache_dir: Path = Field(default=Path(".cache/ghbrowser"), alias="CACHE_DIR")
    cache_count_limit: int = Field(default=100, alias="CACHE_COUNT_LIMIT")
    cache_total_bytes: int = Field(default=50 * 1024 * 1024, alias="CACHE_TOTAL_BYTES")
    # 0 keeps the "always revalidate on hit" behaviour
    revalidate_min_interval_seconds: float = Field(
        default=0, alias="REVALIDATE_MIN_INTERVAL_SECONDS"
    )

    data_dir: Path = Field(default=Path(".data/ghbrowser"), alias="DATA_DIR")
    shared_dir: Optional[Path] = Field(default=None, alias="SHARED_DIR")  # widget mirror
    history_limit: int = Field(default=20, alias="HISTORY_LIMIT")
    search_debounce_seconds: float = Field(default=0.5, alias="SEARCH_DEBOUNCE_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # ignore unrelated env vars to avoid validation errors


@lru_cache
def get_settings() -> Settings:
    return Settings()
