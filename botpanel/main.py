"""FastAPI application: dashboard API, chat client and background jobs"""

import asyncio
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from botpanel import __version__
from botpanel.api import commands_router, logs_router, status_router, test_command_router
from botpanel.api.errors import register_exception_handlers
from botpanel.bot import BotService
from botpanel.config import Settings, settings as default_settings
from botpanel.scheduler import SchedulerService
from botpanel.services.chat_client import ChatClient
from botpanel.services.command_simulator import CommandSimulator
from botpanel.services.stats_service import StatsService
from botpanel.storage import MemStorage
from botpanel.supervisor import Supervisor
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(
    storage: Optional[MemStorage] = None,
    chat_client: Optional[ChatClient] = None,
    settings: Optional[Settings] = None,
    start_services: bool = True,
) -> FastAPI:
    """
    Build the application.

    Args:
        storage: Store to serve (a fresh seeded store by default)
        chat_client: Chat client to use instead of starting the Telegram bot
        settings: Settings override (the global settings by default)
        start_services: Start the bot, supervisor hooks and scheduler on startup

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    storage = storage or MemStorage(seed_defaults=settings.seed_default_commands)

    app = FastAPI(
        title="BotPanel",
        description="Dashboard backend for a chat bot",
        version=__version__,
    )

    supervisor = Supervisor(storage, keep_serving=settings.supervisor_keep_serving)
    scheduler = SchedulerService(settings)

    app.state.settings = settings
    app.state.storage = storage
    app.state.chat_client = chat_client
    app.state.supervisor = supervisor
    app.state.scheduler = scheduler
    app.state.simulator = CommandSimulator(storage)
    app.state.stats_service = StatsService(storage)
    app.state.started_at = time.time()

    register_exception_handlers(app)

    app.include_router(status_router)
    app.include_router(commands_router)
    app.include_router(logs_router)
    app.include_router(test_command_router)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """Log every API request with its status and duration"""
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "api_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=duration_ms,
            )
        return response

    def current_chat_client() -> Optional[ChatClient]:
        return app.state.chat_client

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup"""
        if not start_services:
            return

        logger.debug(f"Starting BotPanel v{__version__}")
        supervisor.install(asyncio.get_running_loop())

        if app.state.chat_client is None and settings.bot_token:
            bot_service = BotService(storage, supervisor=supervisor, token=settings.bot_token)
            try:
                await bot_service.initialize()
                await bot_service.start_polling()
                app.state.chat_client = bot_service
                app.state.stats_service.reset(bot_service)
                logger.info(f"✅ Bot @{bot_service.bot_username} is online")
            except Exception as e:
                logger.error(f"Failed to start chat client, API will report it unavailable: {e}")
                await bot_service.close()
        elif app.state.chat_client is None:
            logger.warning("⚠️ BOT_TOKEN not set, chat client disabled")

        scheduler.initialize()
        scheduler.schedule_maintenance(app.state.stats_service, current_chat_client)
        scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        if not start_services:
            return

        logger.debug("Shutting down BotPanel")
        scheduler.stop()

        close = getattr(app.state.chat_client, "close", None)
        if close is not None:
            await close()

        supervisor.uninstall()

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Liveness plus the supervisor's health decision"""
        chat_client = app.state.chat_client
        checks: Dict[str, Any] = {
            "status": "ok",
            "uptime": time.time() - app.state.started_at,
            "bot": bool(chat_client is not None and chat_client.is_ready()),
            "scheduler": scheduler.running,
            "jobs": scheduler.job_ids(),
            "faults": supervisor.fault_count,
        }

        if not supervisor.healthy:
            checks["status"] = "error"
            logger.warning("Health check failed: process marked unhealthy")
            return JSONResponse(status_code=503, content=checks)

        return checks

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": "BotPanel",
            "version": __version__,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "status": "/api/status",
                "stats": "/api/stats",
                "commands": "/api/commands",
                "logs": "/api/logs",
                "test_command": "/api/test-command",
                "restart": "/api/restart",
            },
        }

    return app


# Global application instance
app = create_app()
