"""Upstream completion service configuration."""

from pydantic import BaseModel


class UpstreamConfig(BaseModel, frozen=True):
    """Upstream completion service settings."""

    base_url: str
    session_opened_path: str
    chat_stream_path: str
    connect_timeout: float
    replay_history: bool
    default_model: str
    fallback_agent_name: str

    def url_for(self, path: str) -> str:
        """Join a service path onto the base URL."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
