"""Server configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Bind address and reload flag for the uvicorn entry point."""

    host: str
    port: int
    reload: bool
