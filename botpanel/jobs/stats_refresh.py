"""Statistics refresh job"""

from typing import Callable, Optional

from botpanel.services.chat_client import ChatClient
from botpanel.services.stats_service import StatsService
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)


async def stats_refresh_job(
    stats_service: StatsService,
    get_chat_client: Callable[[], Optional[ChatClient]],
):
    """Replace the statistics record with a fresh snapshot while the chat client is up"""
    chat_client = get_chat_client()
    if chat_client is None:
        logger.debug("Skipping stats refresh: chat client not available")
        return

    measure = getattr(chat_client, "measure_latency", None)
    if measure is not None:
        try:
            await measure()
        except Exception as e:
            logger.warning(f"Failed to measure chat client latency: {e}")

    try:
        stats = stats_service.refresh(chat_client)
        logger.debug(f"Bot stats refreshed: uptime={stats.uptime} servers={stats.servers}")
    except Exception as e:
        logger.error(f"Failed to refresh bot stats: {e}", exc_info=True)
