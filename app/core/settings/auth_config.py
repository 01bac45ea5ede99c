"""Identity provider token verification configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """JWT verification and request throttling settings."""

    secret_key: SecretStr
    algorithm: str
    audience: str | None
    chat_rate_limit: str
