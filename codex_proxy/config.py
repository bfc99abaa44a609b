"""
FastAPI application configuration module
"""

from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from .auth import AuthData, load_auth

# 加载.env文件,覆盖电脑自身环境变量
load_dotenv(override=True)


DEFAULT_ALLOWED_MODELS: Tuple[str, ...] = ("gpt-5", "gpt-5.2", "gpt-5.3-codex", "gpt-5.2-codex")

DEFAULT_BACKEND_URL = "https://chatgpt.com/backend-api/codex/responses"


class ConfigError(RuntimeError):
    """Raised when the proxy cannot start with the given configuration."""


def load_allowed_models(raw: Optional[str]) -> list[str]:
    """
    Parse the comma-separated ALLOWED_MODELS value.

    Falls back to the built-in defaults when nothing usable is configured.
    Duplicates are dropped, first occurrence wins.
    """
    configured = [m.strip() for m in (raw or "").split(",") if m.strip()]
    source = configured or list(DEFAULT_ALLOWED_MODELS)

    seen = set()
    deduped = []
    for model in source:
        if model not in seen:
            seen.add(model)
            deduped.append(model)
    return deduped


class Settings(BaseSettings):
    """Application settings"""

    # Server Configuration
    LISTEN_PORT: int = 8080

    # Codex auth.json location
    AUTH_PATH: str = "~/.codex/auth.json"

    # Model allowlist, comma separated
    ALLOWED_MODELS: Optional[str] = None

    # Backend Responses API endpoint
    BACKEND_URL: str = DEFAULT_BACKEND_URL

    # Logging Configuration - 支持三个等级：false, info, debug
    LOG_LEVEL: str = "info"

    # Outbound proxy (optional)
    HTTPS_PROXY: Optional[str] = None

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        value = str(value or "info").lower()
        return value if value in ["false", "info", "debug"] else "info"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


class ProxyConfig(BaseModel):
    """Immutable configuration shared by every in-flight request."""

    model_config = ConfigDict(frozen=True)

    allowed_models: Tuple[str, ...]
    backend_url: str = DEFAULT_BACKEND_URL
    auth: AuthData = Field(default_factory=AuthData)

    def is_model_allowed(self, model: str) -> bool:
        return model in self.allowed_models


def load_proxy_config(app_settings: Settings) -> ProxyConfig:
    """Build the process-wide ProxyConfig from settings (reads auth.json)."""
    allowed_models = load_allowed_models(app_settings.ALLOWED_MODELS)
    if not allowed_models:
        raise ConfigError("No allowed models configured. Set ALLOWED_MODELS or use defaults.")

    return ProxyConfig(
        allowed_models=tuple(allowed_models),
        backend_url=app_settings.BACKEND_URL,
        auth=load_auth(app_settings.AUTH_PATH),
    )
