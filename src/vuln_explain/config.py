"""Runtime configuration read from environment variables."""

import os
from dataclasses import dataclass, field

DEFAULT_GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_RAW_URL = "https://raw.githubusercontent.com"

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.environ.get(name)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Service settings.

    Credentials are optional here; a missing LLM key is reported as a
    ConfigurationError when the provider is first used.
    """

    llm_provider: str = "groq"
    groq_api_key: str | None = None
    groq_api_url: str = DEFAULT_GROQ_API_URL
    groq_model: str = DEFAULT_GROQ_MODEL
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    github_token: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_raw_url: str = DEFAULT_GITHUB_RAW_URL
    cache_ttl_seconds: float = 3600.0
    max_repo_files: int = 10
    file_preview_chars: int = 500
    http_timeout_seconds: float = 60.0
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    log_level: str = "INFO"
    port: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            llm_provider=os.environ.get("LLM_PROVIDER", "groq").strip().lower(),
            groq_api_key=os.environ.get("GROQ_API_KEY") or None,
            groq_api_url=os.environ.get("GROQ_API_URL", DEFAULT_GROQ_API_URL),
            groq_model=os.environ.get("GROQ_MODEL", DEFAULT_GROQ_MODEL),
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            gemini_model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            github_api_url=os.environ.get("GITHUB_API_URL", DEFAULT_GITHUB_API_URL),
            github_raw_url=os.environ.get("GITHUB_RAW_URL", DEFAULT_GITHUB_RAW_URL),
            cache_ttl_seconds=_env_float("CACHE_TTL_SECONDS", 3600.0),
            max_repo_files=_env_int("MAX_REPO_FILES", 10),
            file_preview_chars=_env_int("FILE_PREVIEW_CHARS", 500),
            http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 60.0),
            cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            port=_env_int("PORT", 5000),
        )
