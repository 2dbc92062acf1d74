"""Statistics service: builds BotStat snapshots from the chat client and the process"""

from datetime import datetime
from typing import Optional

import psutil

from botpanel.models import BotStat, BotStatInput
from botpanel.services.chat_client import ChatClient
from botpanel.storage import MemStorage, utcnow
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)


def format_uptime(started_at: datetime, now: Optional[datetime] = None) -> str:
    """Format the time since ``started_at`` as ``<d>d <h>h <m>m``"""
    now = now or utcnow()
    seconds = max(int((now - started_at).total_seconds()), 0)
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    return f"{days}d {hours}h {minutes}m"


def memory_usage() -> str:
    """Resident memory of this process, rounded to whole megabytes"""
    try:
        rss = psutil.Process().memory_info().rss
    except psutil.Error as e:
        logger.warning(f"Failed to read process memory: {e}")
        return "0 MB"
    return f"{round(rss / 1024 / 1024)} MB"


class StatsService:
    """Keeps the statistics singleton in step with the chat client"""

    def __init__(self, storage: MemStorage):
        self.storage = storage

    def snapshot(self, chat_client: ChatClient, started_at: datetime, now: Optional[datetime] = None) -> BotStatInput:
        now = now or utcnow()
        return BotStatInput(
            uptime=format_uptime(started_at, now),
            servers=chat_client.guild_count(),
            commands=len(self.storage.list_commands()),
            memory_usage=memory_usage(),
            api_latency=chat_client.latency_ms(),
            started_at=started_at,
            updated_at=now,
        )

    def reset(self, chat_client: ChatClient) -> BotStat:
        """Start a fresh uptime period (used by restart)"""
        now = utcnow()
        return self.storage.replace_bot_stats(self.snapshot(chat_client, started_at=now, now=now))

    def refresh(self, chat_client: ChatClient) -> BotStat:
        """Recompute the statistics, keeping the current uptime period"""
        current = self.storage.get_bot_stats()
        started_at = current.started_at if current is not None else utcnow()
        return self.storage.replace_bot_stats(self.snapshot(chat_client, started_at=started_at))
