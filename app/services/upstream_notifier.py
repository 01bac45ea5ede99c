"""Best-effort "conversation opened" hint for new conversations."""

import httpx
import structlog

from app.models.agent import Agent
from app.schemas.chat_schema import FileAttachment
from app.schemas.upstream_schema import AgentSchema, SessionOpenedPayload
from app.services.upstream_client import UpstreamClient

logger = structlog.get_logger()


def collect_file_urls(
    agent: Agent | None, attachments: list[FileAttachment]
) -> list[str]:
    """Knowledge-base URLs followed by attachment URLs, blanks and repeats dropped."""
    urls: list[str] = []
    if agent is not None:
        urls.extend(kf.file_url for kf in agent.knowledge_files)
    urls.extend(f.url for f in attachments)
    return list(dict.fromkeys(url for url in urls if url))


class UpstreamNotifier:
    """Hands the upstream service its durable context once per conversation.

    Failures are logged and swallowed: the chat request proceeds without the
    hint.
    """

    def __init__(self, client: UpstreamClient) -> None:
        self._client = client

    async def notify(
        self,
        *,
        user_email: str,
        agent_id: str,
        agent_name: str,
        file_urls: list[str],
        model: str,
        instructions: str,
    ) -> bool:
        """Send the hint; return whether the upstream accepted it."""
        payload = SessionOpenedPayload(
            user_email=user_email,
            gpt_id=agent_id,
            gpt_name=agent_name,
            file_urls=file_urls,
            agent_schema=AgentSchema(model=model, instructions=instructions),
        )
        try:
            response = await self._client.open_session(payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Session-opened notification failed",
                error_code="NOTIFIER_FAILURE",
                agent_id=agent_id,
                error=str(exc),
            )
            return False

        if not response.is_success:
            logger.warning(
                "Session-opened notification rejected",
                error_code="NOTIFIER_FAILURE",
                agent_id=agent_id,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        logger.info(
            "Session-opened notification sent",
            agent_id=agent_id,
            file_count=len(file_urls),
        )
        return True
