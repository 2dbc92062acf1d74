"""Keep-alive job: periodic self health check so the host does not idle the process"""

from typing import Callable, Optional

import aiohttp

from botpanel.services.chat_client import ChatClient
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)


async def keep_alive_job(
    url: str,
    timeout: int = 10,
    get_chat_client: Optional[Callable[[], Optional[ChatClient]]] = None,
):
    """Ping ``url`` and report chat client readiness; failures are logged, never raised"""
    logger.info("Keep-alive ping to prevent application from sleeping")

    try:
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                logger.info(f"Keep-alive pong received (status {response.status})")
    except Exception as e:
        logger.warning(f"Keep-alive error: {e}")

    chat_client = get_chat_client() if get_chat_client else None
    if chat_client is not None and not chat_client.is_ready():
        logger.warning("Chat client is not ready, waiting for it to reconnect")
