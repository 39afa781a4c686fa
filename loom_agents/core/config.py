"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

Environment variables use double underscore (__) as delimiters for nested properties.
For example: AI_PROVIDER__OPENAI__API_KEY maps to settings.ai_provider.openai.api_key
"""

from typing import Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# LLM Provider Configuration Models
# =====================================================================


class OpenAIConfig(BaseModel):
    """OpenAI API configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API key for authentication")

    model_config = {"populate_by_name": True}


class AnthropicConfig(BaseModel):
    """Anthropic API configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="Anthropic API key for authentication")

    model_config = {"populate_by_name": True}


class GoogleConfig(BaseModel):
    """Google API configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="Google API key for authentication")

    model_config = {"populate_by_name": True}


class AIProviderConfig(BaseModel):
    """Container for every supported LLM provider."""

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    google: GoogleConfig = Field(default_factory=GoogleConfig)

    def api_key_for(self, provider: str) -> Optional[str]:
        """Return the plain API key configured for ``provider``, if any."""
        cfg = getattr(self, provider, None)
        secret = getattr(cfg, "api_key", None)
        return secret.get_secret_value() if secret else None


class LogfireConfig(BaseModel):
    """Logfire monitoring configuration."""

    enabled: bool = Field(default=False, description="Enable Logfire monitoring")
    token: Optional[SecretStr] = Field(default=None, description="Logfire write token")
    service_name: str = Field(default="loom-agents", description="Service name reported to Logfire")
    environment: str = Field(default="development", description="Deployment environment tag")
    trace_pydantic_ai: bool = Field(default=True, description="Instrument pydantic-ai model calls")


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="LOOM_AGENTS_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="LOOM_AGENTS_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="LOOM_AGENTS_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write DEBUG logs to <log_file_dir>/loom_agents.log",
        alias="LOOM_AGENTS_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Agent Run Defaults
    # =====================================================================
    max_steps: int = Field(
        default=10,
        ge=1,
        description="Default cap on tool-calling steps per agent run",
        alias="LOOM_AGENTS_MAX_STEPS",
    )
    timeout_ms: int = Field(
        default=60_000,
        gt=0,
        description="Default wall-clock timeout per agent run in milliseconds",
        alias="LOOM_AGENTS_TIMEOUT_MS",
    )
    max_cost_usd: float = Field(
        default=0.50,
        ge=0.0,
        description="Default cost ceiling per agent run in USD",
        alias="LOOM_AGENTS_MAX_COST_USD",
    )
    default_model: str = Field(
        default="claude-sonnet-4-5",
        description="Model used when a run does not name one",
        alias="LOOM_AGENTS_DEFAULT_MODEL",
    )

    # =====================================================================
    # Grouped Configurations
    # =====================================================================
    ai_provider: AIProviderConfig = Field(default_factory=AIProviderConfig)
    logfire: LogfireConfig = Field(default_factory=LogfireConfig)


settings = Settings()
