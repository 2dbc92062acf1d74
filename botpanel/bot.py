"""Bot service using aiogram"""

import asyncio
import re
import time
from typing import Any, Dict, Optional, Set

from aiogram import Bot, Dispatcher, F
from aiogram.types import BotCommand, Chat, Message

from botpanel.config import settings
from botpanel.models import LogCreate
from botpanel.models.log import EVENT_COMMAND
from botpanel.services.command_simulator import (
    parse_command_token,
    render_fallback,
    render_help,
    render_ping,
    render_stats,
    render_uptime,
)
from botpanel.storage import MemStorage
from botpanel.supervisor import Supervisor
from botpanel.utils.logger import get_logger, truncate_for_log

logger = get_logger(__name__)

# Telegram only accepts lowercase command names of up to 32 characters
BOT_COMMAND_NAME = re.compile(r"^[a-z0-9_]{1,32}$")

GROUP_CHAT_TYPES = ("group", "supergroup", "channel")

DISABLED_REPLY = "This command is currently disabled."
ERROR_REPLY = "There was an error executing this command."


class BotService:
    """
    Telegram client that answers the slash commands registered in the store.

    Implements the ``ChatClient`` capability set used by the dashboard:
    readiness, the number of group chats the bot has seen and the last
    measured API latency.
    """

    def __init__(self, storage: MemStorage, supervisor: Optional[Supervisor] = None, token: Optional[str] = None):
        self.storage = storage
        self.supervisor = supervisor
        self.token = token or settings.bot_token
        self.bot: Optional[Bot] = None
        self.dp: Optional[Dispatcher] = None
        self.bot_username: Optional[str] = None
        self.is_polling = False
        self._polling_task: Optional[asyncio.Task] = None
        self._seen_chats: Set[int] = set()
        self._latency_ms = 0

    async def initialize(self):
        """Initialize bot"""
        if not self.token:
            raise RuntimeError("BOT_TOKEN is not configured")

        try:
            logger.debug("🔧 Initializing bot service...")

            self.bot = Bot(token=self.token)
            self.dp = Dispatcher()

            me = await self.measure_latency()
            self.bot_username = me.username

            logger.debug(f"✅ Bot initialized: @{self.bot_username} ({me.first_name})")

            self._setup_middleware()
            self._setup_handlers()
            await self.sync_commands()

            logger.debug("✅ Bot service initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize bot: {e}")
            raise

    # ChatClient capability set

    def is_ready(self) -> bool:
        return self.bot is not None and self.is_polling

    def guild_count(self) -> int:
        return len(self._seen_chats)

    def latency_ms(self) -> int:
        return self._latency_ms

    async def measure_latency(self):
        """Time a getMe round trip; returns the bot user"""
        if not self.bot:
            raise RuntimeError("Bot not initialized. Call initialize() first.")

        started = time.perf_counter()
        me = await self.bot.get_me()
        self._latency_ms = int(round((time.perf_counter() - started) * 1000))
        return me

    def track_chat(self, chat: Optional[Chat]):
        """Remember group chats so guild_count reflects where the bot is used"""
        if chat is not None and chat.type in GROUP_CHAT_TYPES:
            self._seen_chats.add(chat.id)

    # Setup

    def _setup_middleware(self):
        """Setup bot middleware"""
        if not self.dp:
            return

        @self.dp.message.middleware()
        async def chat_tracking_middleware(handler, event: Message, data: Dict[str, Any]):
            self.track_chat(event.chat)
            return await handler(event, data)

        @self.dp.message.middleware()
        async def logging_middleware(handler, event: Message, data: Dict[str, Any]):
            user = event.from_user.first_name if event.from_user else "Unknown"
            chat_type = event.chat.type if event.chat else "unknown"
            logger.debug(f"📨 Message received: '{truncate_for_log(event.text or '')}' from {user} in {chat_type} chat")
            return await handler(event, data)

    def _setup_handlers(self):
        """Setup message handlers"""
        if not self.dp:
            return

        @self.dp.message(F.text.startswith("/"))
        async def slash_command(message: Message):
            await self.handle_command(message)

        @self.dp.my_chat_member()
        async def membership_changed(event):
            self.track_chat(event.chat)

    async def sync_commands(self):
        """Publish the active commands from the store as the bot's command menu"""
        if not self.bot:
            return

        commands = [
            BotCommand(command=command.name, description=command.description[:256])
            for command in self.storage.list_commands()
            if command.active and BOT_COMMAND_NAME.match(command.name)
        ]

        try:
            await self.bot.set_my_commands(commands)
            logger.debug(f"✅ {len(commands)} bot commands registered")
        except Exception as e:
            logger.error(f"Failed to register bot commands: {e}")

    # Command handling

    def _resolve_token(self, text: str) -> Optional[str]:
        """Command name from ``/name@bot args``; None when addressed to another bot"""
        token = parse_command_token(text)
        if "@" in token:
            token, mention = token.split("@", 1)
            if self.bot_username and mention.lower() != self.bot_username.lower():
                return None
        return token

    async def handle_command(self, message: Message) -> Optional[str]:
        """Answer a slash command; returns the command name that ran, if any"""
        text = message.text or ""
        token = self._resolve_token(text)
        if not token:
            return None

        command = self.storage.get_command_by_name(token)
        if command is None:
            logger.debug(f"Ignoring unknown command: {truncate_for_log(token)}")
            return None

        if not command.active:
            await message.answer(DISABLED_REPLY)
            return None

        try:
            await self._execute(command.name, text, message)
            self.storage.create_log(
                LogCreate(
                    event_type=EVENT_COMMAND,
                    server=self._server_name(message),
                    user=self._user_name(message),
                    details=f"Executed /{command.name}",
                )
            )
            return command.name
        except Exception as e:
            if self.supervisor is not None:
                self.supervisor.record_fault(e)
            else:
                logger.error(f"Error executing command {command.name}: {e}", exc_info=True)

            try:
                await message.answer(ERROR_REPLY)
            except Exception as reply_error:
                logger.error(f"Failed to send error reply: {reply_error}")
            return None

    async def _execute(self, name: str, text: str, message: Message):
        if name == "ping":
            started = time.perf_counter()
            sent = await message.answer("Pinging...")
            latency = int(round((time.perf_counter() - started) * 1000))
            await sent.edit_text(render_ping(latency, self._latency_ms))
        elif name == "help":
            await message.answer(render_help(self.storage.list_commands()))
        elif name == "uptime":
            await message.answer(render_uptime(self.storage.get_bot_stats()))
        elif name == "stats":
            await message.answer(render_stats(self.storage.get_bot_stats()))
        else:
            await message.answer(render_fallback(text))

    @staticmethod
    def _server_name(message: Message) -> str:
        chat = message.chat
        if chat is not None and chat.title:
            return chat.title
        return "Direct Message"

    @staticmethod
    def _user_name(message: Message) -> str:
        user = message.from_user
        if user is None:
            return "Unknown"
        return user.username or user.first_name or "Unknown"

    # Lifecycle

    async def start_polling(self):
        """Start bot polling"""
        if not self.bot or not self.dp:
            raise RuntimeError("Bot not initialized. Call initialize() first.")

        if self.is_polling:
            logger.warning("Bot is already polling")
            return

        try:
            logger.debug("🔧 Starting bot polling...")

            try:
                await self.bot.delete_webhook(drop_pending_updates=True)
            except Exception as e:
                logger.warning(f"Failed to clear webhook (may not be set): {e}")

            self.is_polling = True
            self._polling_task = asyncio.create_task(
                self.dp.start_polling(self.bot, handle_signals=False)
            )
            self._polling_task.add_done_callback(self._on_polling_done)
            logger.debug("✅ Bot polling started")
        except Exception as e:
            self.is_polling = False
            logger.error(f"Failed to start polling: {e}")
            raise

    def _on_polling_done(self, task: asyncio.Task):
        """Polling ended on its own or was cancelled; the client is no longer ready"""
        self.is_polling = False
        if task.cancelled():
            return

        error = task.exception()
        if error is None:
            logger.warning("Bot polling stopped")
            return

        if self.supervisor is not None:
            self.supervisor.record_fault(error, "Polling Failure")
        else:
            logger.error(f"Bot polling failed: {error}", exc_info=(type(error), error, error.__traceback__))

    async def stop_polling(self):
        """Stop bot polling"""
        if not self.is_polling:
            return

        try:
            logger.debug("🛑 Stopping bot polling...")
            if self._polling_task:
                self._polling_task.cancel()
                try:
                    await self._polling_task
                except asyncio.CancelledError:
                    pass
            self.is_polling = False
            self._polling_task = None
            logger.debug("✅ Bot polling stopped")
        except Exception as e:
            logger.error(f"Failed to stop polling: {e}")
            self.is_polling = False

    async def close(self):
        """Stop polling and close the HTTP session"""
        await self.stop_polling()
        if self.bot:
            try:
                await self.bot.session.close()
            except Exception as e:
                logger.error(f"Failed to close bot session: {e}")
