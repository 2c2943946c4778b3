import os
from dataclasses import dataclass


def _positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _non_negative_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_request_timeout: float = 60.0
    llm_max_attempts: int = 3
    llm_retry_base_delay: float = 0.4  # seconds, doubled per attempt
    github_token: str = ""
    github_request_timeout: float = 30.0
    database_url: str = "sqlite:///./passport.db"
    public_base_url: str = "http://localhost:8000"
    rate_limit_max: int = 5
    rate_limit_window_ms: int = 60_000
    rate_limit_storage_uri: str = "memory://"
    skip_code_summary: bool = False
    summary_chunk_chars: int = 12_000
    summary_max_chunks: int = 4
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def max_source_chars(self) -> int:
        """Source fetched for the code summary; anything past the chunks is unused."""
        return self.summary_chunk_chars * self.summary_max_chunks


def get_settings() -> Settings:
    return Settings(
        openai_api_key=os.environ.get("OPENAI_API_KEY", ""),
        openai_base_url=os.environ.get("OPENAI_BASE_URL") or None,
        openai_model=os.environ.get("OPENAI_MODEL", "gpt-4o-mini"),
        llm_max_attempts=_positive_int("LLM_MAX_ATTEMPTS", 3),
        llm_retry_base_delay=_non_negative_float("LLM_RETRY_BASE_DELAY", 0.4),
        github_token=os.environ.get("GITHUB_TOKEN", ""),
        database_url=os.environ.get("DATABASE_URL", "sqlite:///./passport.db"),
        public_base_url=os.environ.get(
            "PUBLIC_BASE_URL", "http://localhost:8000"
        ).rstrip("/"),
        rate_limit_max=_positive_int("RATE_LIMIT_MAX", 5),
        rate_limit_window_ms=_positive_int("RATE_LIMIT_WINDOW_MS", 60_000),
        rate_limit_storage_uri=os.environ.get("RATE_LIMIT_STORAGE_URI") or "memory://",
        skip_code_summary=_flag("SKIP_CODE_SUMMARY"),
        summary_chunk_chars=_positive_int("SUMMARY_CHUNK_CHARS", 12_000),
        summary_max_chunks=_positive_int("SUMMARY_MAX_CHUNKS", 4),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        log_json=_flag("LOG_JSON"),
    )
