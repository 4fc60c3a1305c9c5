"""
EventSnap Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by the app factory; services receive the values they need
       explicitly at construction time.
When:  Loaded once at module import time.

Note on the API key:
    ALIYUN_API_KEY is allowed to be empty at startup. A missing key is not
    fatal to the process: every /api/process request reports it as a
    server configuration error, and /health reports the service as degraded.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── DashScope (Qwen-VL) ───────────────────────────────────────────────
    # What: API key for Alibaba Cloud DashScope
    # Required: per request. Absence yields HTTP 500 on /api/process.
    aliyun_api_key: str = Field(
        default="",
        description="DashScope API key used as the Bearer token",
    )

    # What: Scheme + host of the DashScope API, without a trailing slash
    # Override for the international endpoint (dashscope-intl.aliyuncs.com)
    dashscope_base_url: str = Field(default="https://dashscope.aliyuncs.com")

    # What: Vision-language model used for recognition
    # Options: qwen-vl-plus (default), qwen-vl-max (slower, more accurate)
    dashscope_model: str = Field(default="qwen-vl-plus")

    # What: Sends the X-DashScope-Async: enable header
    dashscope_async: bool = Field(default=True)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("dashscope_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def api_key_configured(self) -> bool:
        return bool(self.aliyun_api_key and self.aliyun_api_key != "your_aliyun_api_key_here")

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Raises ValueError with guidance; the caller logs it and keeps serving.
        """
        errors = []
        if not self.api_key_configured:
            errors.append(
                "ALIYUN_API_KEY is not set. "
                "Create a key in the DashScope console (Model Studio → API-KEY)."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, used by the app factory when no explicit settings are given
settings = Settings()
