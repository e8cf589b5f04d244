import asyncio
import logging
from typing import Optional

import httpx

from app.core.metrics import SELF_PINGS

logger = logging.getLogger(__name__)


async def ping_once(url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> bool:
    """GET the service's own URL once. Errors are logged, never raised."""
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        SELF_PINGS.labels(outcome="error").inc()
        logger.warning("Keep-alive ping to %s failed: %s", url, e)
        return False

    SELF_PINGS.labels(outcome="success").inc()
    logger.debug("Keep-alive ping to %s returned %s", url, response.status_code)
    return True


async def keep_alive_loop(url: str, interval_seconds: float, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
    """Ping ``url`` every ``interval_seconds`` until cancelled."""
    logger.info("Keep-alive pinging %s every %ss", url, interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        await ping_once(url, transport=transport)
