import logging

import httpx

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {"Accept": "application/json"}


def create_client(
    headers: dict[str, str] | None = None,
    timeout: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the AsyncClient used by the network resolution strategy."""
    merged = {**_DEFAULT_HEADERS, **(headers or {})}
    return httpx.AsyncClient(
        headers=merged,
        timeout=timeout,
        follow_redirects=True,
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        transport=transport,
    )


async def close_client(client: httpx.AsyncClient | None):
    if client is not None and not client.is_closed:
        await client.aclose()
        logger.debug("Closed HTTP client")
