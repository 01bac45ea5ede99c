"""Redis connection configuration."""

from pydantic import BaseModel


class RedisConfig(BaseModel, frozen=True):
    """Redis connection and token revocation list settings."""

    url: str
    revoked_prefix: str

    def revoked_key(self, jti: str) -> str:
        """Key under which the identity provider marks a token as revoked."""
        return f"{self.revoked_prefix}{jti}"
