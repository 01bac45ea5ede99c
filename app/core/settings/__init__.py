"""Domain-specific configuration models."""

from app.core.settings.app_config import AppConfig
from app.core.settings.auth_config import AuthConfig
from app.core.settings.database_config import DatabaseConfig
from app.core.settings.redis_config import RedisConfig
from app.core.settings.server_config import ServerConfig
from app.core.settings.upstream_config import UpstreamConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "RedisConfig",
    "ServerConfig",
    "UpstreamConfig",
]
