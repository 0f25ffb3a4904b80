# =============================================================================
# core/services/delivery_service.py - Content Delivery Proxy
# =============================================================================
# Fetches a blob from its storage URL and hands the bytes back as a stream
# with forced-download headers. Clients never see the upstream URL.
#
# One upstream fetch per download, no caching. The upstream response is
# closed when the stream is exhausted or abandoned, so a client that
# disconnects mid-download does not leave the upstream connection open.
# =============================================================================

import logging
from typing import AsyncIterator

import anyio
import httpx

from app.config import settings
from app.exceptions import UpstreamDeliveryError
from lib.utils import content_disposition

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Chunk size for relaying upstream bytes
CHUNK_SIZE = 64 * 1024


class DeliveryStream:
    """
    An open upstream response ready to be relayed to the client.

    Iterate `iter_bytes()` exactly once; it releases the upstream
    connection when it finishes or is closed early.
    """

    def __init__(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient,
        media_type: str,
        filename: str | None,
    ):
        self._response = response
        self._client = client
        self.media_type = media_type
        self.filename = filename
        self.closed = False

    @property
    def headers(self) -> dict[str, str]:
        """Headers to send with the relayed body."""
        headers = {
            "Content-Type": self.media_type,
            "Content-Disposition": content_disposition(self.filename),
            "X-Content-Type-Options": "nosniff",
            "Cache-Control": "private, no-store",
        }
        # httpx decodes content-encoding, so an upstream length is only
        # valid for unencoded bodies
        length = self._response.headers.get("content-length")
        if length and not self._response.headers.get("content-encoding"):
            headers["Content-Length"] = length
        return headers

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes(CHUNK_SIZE):
                yield chunk
        finally:
            # Shielded so cleanup still runs when a client disconnect
            # cancels the response task
            with anyio.CancelScope(shield=True):
                await self.aclose()

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._response.aclose()
        await self._client.aclose()


class ContentDeliveryProxy:
    """
    Relays stored content to clients.

    Example:
        stream = await ContentDeliveryProxy().fetch(url, "passport.pdf", "application/pdf")
        return StreamingResponse(stream.iter_bytes(), headers=stream.headers)
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.DOWNLOAD_TIMEOUT_SECONDS

    async def fetch(
        self,
        url: str,
        filename: str | None,
        mime_type: str | None = None,
    ) -> DeliveryStream:
        """
        Open the upstream object for streaming.

        Content-Type is the stored MIME type if there is one, else the type
        the upstream reports, else application/octet-stream.

        Raises:
            UpstreamDeliveryError: If the upstream cannot be reached or
                answers with an error status. This is never turned into a
                404; the record still exists.
        """
        client = httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            follow_redirects=True,
        )

        try:
            response = await client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error(f"Upstream fetch failed for {url}: {e}")
            raise UpstreamDeliveryError()

        if response.is_error:
            await response.aclose()
            await client.aclose()
            logger.error(f"Upstream fetch for {url} returned {response.status_code}")
            raise UpstreamDeliveryError()

        upstream_type = response.headers.get("content-type")
        media_type = mime_type or upstream_type or DEFAULT_MEDIA_TYPE

        logger.info(f"Streaming {filename!r} from storage ({media_type})")
        return DeliveryStream(response, client, media_type, filename)
