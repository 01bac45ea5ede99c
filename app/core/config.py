"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.settings import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    RedisConfig,
    ServerConfig,
    UpstreamConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.upstream.base_url).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="chat-relay",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins outside development",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )

    # Identity provider tokens
    jwt_secret_key: SecretStr = Field(
        description="Shared secret used to verify identity provider tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_audience: str | None = Field(
        default=None,
        description="Expected token audience (skipped when unset)",
    )
    chat_rate_limit: str = Field(
        default="30/minute",
        description="Chat stream endpoint rate limit",
    )

    # Upstream completion service
    upstream_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the upstream completion service",
    )
    upstream_session_opened_path: str = Field(
        default="/gpt-opened",
        description="Session-initialization endpoint path",
    )
    upstream_chat_stream_path: str = Field(
        default="/chat-stream",
        description="Streaming completion endpoint path",
    )
    upstream_connect_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Connect timeout in seconds (reads are never timed out)",
    )
    upstream_replay_history: bool = Field(
        default=False,
        description="Send prior turns of the session with each completion request",
    )
    default_model: str = Field(
        default="gpt-4o",
        description="Model used when neither the agent nor the request names one",
    )
    fallback_agent_name: str = Field(
        default="Custom GPT",
        description="Agent display name used when the agent row is unknown",
    )

    # Database
    database_url: SecretStr = Field(
        description="Async database URL (mysql+aiomysql://...)",
    )
    database_pool_size: int = Field(
        default=10,
        ge=1,
        description="Connection pool size",
    )
    database_max_overflow: int = Field(
        default=20,
        ge=0,
        description="Connections allowed beyond the pool size",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    token_revoked_prefix: str = Field(
        default="blacklist:",
        description="Key prefix of the identity provider's token revocation list",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
            cors_origins=tuple(self.cors_origins),
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            reload=self.is_development,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """Token verification configuration."""
        return AuthConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            audience=self.jwt_audience,
            chat_rate_limit=self.chat_rate_limit,
        )

    @cached_property
    def upstream(self) -> UpstreamConfig:
        """Upstream completion service configuration."""
        return UpstreamConfig(
            base_url=self.upstream_base_url,
            session_opened_path=self.upstream_session_opened_path,
            chat_stream_path=self.upstream_chat_stream_path,
            connect_timeout=self.upstream_connect_timeout,
            replay_history=self.upstream_replay_history,
            default_model=self.default_model,
            fallback_agent_name=self.fallback_agent_name,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(
            url=self.database_url,
            pool_size=self.database_pool_size,
            max_overflow=self.database_max_overflow,
        )

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(
            url=self.redis_url,
            revoked_prefix=self.token_revoked_prefix,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
