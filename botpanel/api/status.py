"""
Statistics API Router

Bot status, the statistics singleton and restart.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from botpanel.api.dependencies import get_chat_client, get_stats_service, get_storage
from botpanel.api.errors import internal_errors, read_json_body, validate_payload
from botpanel.exceptions import ServiceUnavailableError
from botpanel.models import BotStat, BotStatInput, LogCreate
from botpanel.models.log import EVENT_SYSTEM
from botpanel.services.chat_client import ChatClient
from botpanel.services.stats_service import StatsService
from botpanel.storage import MemStorage
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["status"])

BOT_UNAVAILABLE = "Bot is not available"


@router.get("/status")
async def get_status(
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
) -> Dict[str, Any]:
    """Chat client liveness combined with the statistics record"""
    with internal_errors("Failed to get bot status"):
        stats = storage.get_bot_stats()
        if chat_client is None or stats is None:
            raise ServiceUnavailableError(BOT_UNAVAILABLE)

        body = {"status": "online" if chat_client.is_ready() else "offline"}
        body.update(stats.model_dump(mode="json", by_alias=True, exclude={"id"}))
        return body


@router.get("/stats", response_model=BotStat)
async def get_stats(
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
):
    with internal_errors("Failed to get bot stats"):
        stats = storage.get_bot_stats()
        if chat_client is None or stats is None:
            raise ServiceUnavailableError(BOT_UNAVAILABLE)
        return stats


@router.put("/stats", response_model=BotStat)
async def replace_stats(request: Request, storage: MemStorage = Depends(get_storage)):
    """Replace the statistics record; every field is required"""
    with internal_errors("Failed to update bot stats"):
        payload = await read_json_body(request, "Invalid stats data")
        data = validate_payload(BotStatInput, payload, "Invalid stats data")
        return storage.replace_bot_stats(data)


@router.post("/restart")
async def restart_bot(
    storage: MemStorage = Depends(get_storage),
    chat_client: Optional[ChatClient] = Depends(get_chat_client),
    stats_service: StatsService = Depends(get_stats_service),
) -> Dict[str, str]:
    with internal_errors("Failed to restart bot"):
        storage.create_log(
            LogCreate(
                event_type=EVENT_SYSTEM,
                server="-",
                user="-",
                details="Bot restart requested",
            )
        )

        if chat_client is None:
            raise ServiceUnavailableError(BOT_UNAVAILABLE)

        stats_service.reset(chat_client)
        logger.info("Bot statistics reset by restart request")
        return {"message": "Bot restarted successfully"}
