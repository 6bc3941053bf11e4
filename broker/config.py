"""Configuration management using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Identity Configuration
    owner_id: str = Field(default="916356545412@c.us", description="Requester identity on the transport")
    group_suffix: str = Field(default="@g.us", description="Sender suffix marking group-broadcast origin")
    ignored_senders: str = Field(default="status@broadcast", description="System channels to ignore (comma separated)")

    # Topic Configuration
    topics_file: str = Field(default="./groups.json", description="Topic keyword to destination mapping")

    # State Persistence
    state_backend: str = Field(default="json", description="Durable store backend (json or duckdb)")
    state_file: str = Field(default="./data/query_state.json", description="JSON state file path")
    database_path: str = Field(default="./data/broker.db", description="DuckDB database path")

    # Messaging Gateway Configuration
    gateway_base_url: str = Field(default="http://localhost:3000", description="Messaging gateway base URL")
    gateway_token: Optional[str] = Field(default=None, description="Messaging gateway bearer token")
    gateway_timeout: float = Field(default=30.0, description="Gateway request timeout in seconds")

    # Text Normalizer Configuration
    gemini_api_key: Optional[str] = Field(default=None, description="Google Generative Language API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Normalizer model")
    normalizer_timeout: float = Field(default=30.0, description="Normalizer call timeout in seconds")

    # Timing Configuration
    attachment_send_delay: float = Field(default=1.5, description="Delay between forwarded attachments in seconds")
    sweep_interval: int = Field(default=900, description="Housekeeping interval in seconds")
    conversation_ttl: int = Field(default=7200, description="Age after which open conversations expire, in seconds")
    topic_retention: int = Field(default=86400, description="Age after which recent topics are pruned, in seconds")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: str = Field(default="./logs/app.log", description="Log file path")

    def get_ignored_senders(self) -> List[str]:
        """Get list of ignored system senders."""
        return [s.strip() for s in self.ignored_senders.split(",") if s.strip()]


# Global settings instance
settings = Settings()
