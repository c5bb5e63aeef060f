"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from dbchat.config import get_settings

    settings = get_settings()
    print(settings.llm.google_api_key)
    print(settings.agent.schema_cache_ttl)
"""

import logging
import os
import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbchat.models.agent import DEFAULT_SCHEMA_CACHE_TTL, AgentConfig, Provider

_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
}


def parse_duration(value: Any, default: timedelta = DEFAULT_SCHEMA_CACHE_TTL) -> timedelta:
    """
    Parse a duration such as "1h", "30m", "1h30m", "45s", "500ms" or "3600".

    Bare numbers are seconds. Empty, malformed and non-positive values
    return the default.

    Example:
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
        >>> parse_duration("soon")
        datetime.timedelta(seconds=3600)
    """
    if value is None:
        return default
    if isinstance(value, timedelta):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = timedelta(seconds=value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        if _NUMBER.match(text):
            parsed = timedelta(seconds=float(text))
        else:
            total = 0.0
            position = 0
            for match in _DURATION_PART.finditer(text):
                if match.start() != position:
                    return default
                total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
                position = match.end()
            if position == 0 or position != len(text):
                return default
            parsed = timedelta(seconds=total)
    else:
        return default

    if parsed <= timedelta(0):
        return default
    return parsed


class LLMSettings(BaseSettings):
    """LLM provider configuration."""

    # Provider keys (only providers with a key are offered to clients)
    google_api_key: str | None = Field(
        None,
        description="Google AI API key",
        validation_alias=AliasChoices("LLM_GOOGLE_API_KEY", "GOOGLE_API_KEY", "google_api_key"),
    )
    openai_api_key: str | None = Field(
        None,
        description="OpenAI API key",
        validation_alias=AliasChoices("LLM_OPENAI_API_KEY", "OPENAI_API_KEY", "openai_api_key"),
    )
    anthropic_api_key: str | None = Field(
        None,
        description="Anthropic API key",
        validation_alias=AliasChoices(
            "LLM_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY", "anthropic_api_key"
        ),
    )

    # Common settings
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM responses (0.0 = deterministic)",
    )
    max_tokens: int = Field(
        default=4096,
        gt=0,
        le=32000,
        description="Maximum tokens per LLM response",
    )
    timeout: int = Field(
        default=60,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("google_api_key", "openai_api_key", "anthropic_api_key", mode="before")
    @classmethod
    def empty_key_as_none(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, v: str | None) -> str | None:
        """Validate OpenAI API key format."""
        if v and not v.startswith("sk-"):
            raise ValueError("OpenAI API key must start with 'sk-'")
        return v

    @field_validator("anthropic_api_key")
    @classmethod
    def validate_anthropic_key(cls, v: str | None) -> str | None:
        """Validate Anthropic API key format."""
        if v and not v.startswith("sk-ant-"):
            raise ValueError("Anthropic API key must start with 'sk-ant-'")
        return v


class AgentSettings(BaseSettings):
    """Agent runtime and schema introspection configuration."""

    schema_cache_ttl: timedelta = Field(
        default=DEFAULT_SCHEMA_CACHE_TTL,
        description="How long an introspected schema is reused within a session (e.g. 1h, 30m)",
        validation_alias=AliasChoices(
            "AGENT_SCHEMA_CACHE_TTL", "SCHEMA_CACHE_TTL", "schema_cache_ttl"
        ),
    )
    default_model: str | None = Field(
        None,
        description="Model slug used when a request names none (defaults to the registry default)",
    )
    max_tool_iterations: int = Field(
        default=8,
        ge=1,
        le=25,
        description="Maximum model/tool round trips per chat turn",
    )
    connect_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for a target database connection",
    )
    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for each catalog query",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("schema_cache_ttl", mode="before")
    @classmethod
    def parse_ttl(cls, v: Any) -> timedelta:
        """Accept duration strings; invalid values fall back to one hour."""
        return parse_duration(v)

    @field_validator("default_model", mode="before")
    @classmethod
    def empty_model_as_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, agent, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        API_HOST: API server host
        API_PORT / SERVER_PORT: API server port
        CORS_ORIGINS: Comma-separated allowed origins (read by the API app)
        LLM_* / GOOGLE_API_KEY / OPENAI_API_KEY / ANTHROPIC_API_KEY: see LLMSettings
        AGENT_* / SCHEMA_CACHE_TTL: see AgentSettings
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.agent.schema_cache_ttl
        datetime.timedelta(seconds=3600)
        >>> settings.providers
        {<Provider.GOOGLE: 'google'>: 'AIza...'}
    """

    # Application settings
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="DBChat",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8080,
        gt=0,
        le=65535,
        description="API server port",
        validation_alias=AliasChoices("API_PORT", "SERVER_PORT", "api_port"),
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def providers(self) -> dict[Provider, str]:
        """Configured providers and their API keys (empty keys omitted)."""
        keys = {
            Provider.GOOGLE: self.llm.google_api_key,
            Provider.OPENAI: self.llm.openai_api_key,
            Provider.ANTHROPIC: self.llm.anthropic_api_key,
        }
        return {provider: key for provider, key in keys.items() if key}

    def to_agent_config(self) -> AgentConfig:
        """Build the immutable agent configuration."""
        return AgentConfig(
            providers=self.providers,
            schema_cache_ttl=self.agent.schema_cache_ttl,
            default_model=self.agent.default_model,
            temperature=self.llm.temperature,
            max_tokens=self.llm.max_tokens,
            timeout=self.llm.timeout,
            max_tool_iterations=self.agent.max_tool_iterations,
            connect_timeout=self.agent.connect_timeout,
            command_timeout=self.agent.command_timeout,
        )

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure logging when settings are loaded."""
        self.logging.configure()
        return self

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "providers": [provider.value for provider in self.providers],
                "schema_cache_ttl": str(self.agent.schema_cache_ttl),
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("DBCHAT_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses functools.lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
