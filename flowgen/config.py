from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # App
    app_name: str = "FlowGen API"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_prefix: str = "/api"
    cors_origins: str = "http://localhost:3000"

    # LLM Providers
    llm_provider: Literal["openai", "anthropic"] = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # LLM Client Configuration
    llm_request_timeout: int = 60  # Timeout in seconds for LLM API requests
    llm_max_retries: int = 2  # Retries handled by the LangChain client itself

    # Source control (GitHub)
    github_token: str = ""
    github_api_url: str = "https://api.github.com"

    # Hosting provider (Vercel)
    vercel_token: str = ""
    vercel_team_id: str = ""
    vercel_api_url: str = "https://api.vercel.com"

    # Outbound HTTP
    http_timeout: float = 30.0
    http_max_retries: int = Field(default=3, ge=1)  # Attempts per call, including the first
    http_retry_backoff: float = Field(default=1.0, ge=0)  # Base delay, doubled per attempt

    # Deployment polling
    deploy_poll_interval: float = Field(default=5.0, gt=0)
    deploy_max_wait: float = Field(default=300.0, ge=0)  # Total seconds spent waiting for READY

    # Database
    database_url: str = "sqlite+aiosqlite:///./flowgen.db"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def hosting_enabled(self) -> bool:
        """Whether the deployment pipeline can link and build on Vercel."""
        return bool(self.vercel_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


settings = get_settings()
