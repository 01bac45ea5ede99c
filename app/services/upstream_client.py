"""HTTP client for the upstream completion service."""

import httpx
import structlog

from app.core.exceptions import UpstreamErrorStatusError, UpstreamUnavailableError
from app.core.settings import UpstreamConfig
from app.schemas.upstream_schema import CompletionPayload, SessionOpenedPayload

logger = structlog.get_logger()


def build_http_client(config: UpstreamConfig) -> httpx.AsyncClient:
    """Create the shared client; reads stay untimed so long replies can stream."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=config.connect_timeout, read=None, write=None, pool=None
        ),
    )


class UpstreamClient:
    """Issues session-opened and streaming completion requests."""

    def __init__(self, http_client: httpx.AsyncClient, config: UpstreamConfig) -> None:
        self._http = http_client
        self._config = config

    async def open_session(self, payload: SessionOpenedPayload) -> httpx.Response:
        """POST the session-opened hint. Transport errors propagate."""
        return await self._http.post(
            self._config.url_for(self._config.session_opened_path),
            json=payload.model_dump(by_alias=True),
        )

    async def open_stream(self, payload: CompletionPayload) -> httpx.Response:
        """Send the completion request and return the un-read streaming response.

        The caller owns the returned response and must close it.
        """
        request = self._http.build_request(
            "POST",
            self._config.url_for(self._config.chat_stream_path),
            json=payload.model_dump(),
            headers={"Accept": "text/event-stream"},
        )
        try:
            response = await self._http.send(request, stream=True)
        except httpx.TransportError as exc:
            logger.error(
                "Upstream completion service unreachable",
                url=str(request.url),
                error=str(exc),
            )
            raise UpstreamUnavailableError() from exc

        if not response.is_success:
            try:
                body = await response.aread()
            except httpx.HTTPError:
                body = b""
            finally:
                await response.aclose()
            logger.error(
                "Upstream completion service returned an error",
                status_code=response.status_code,
                body=body.decode("utf-8", errors="replace")[:500],
            )
            raise UpstreamErrorStatusError(response.status_code)

        return response
