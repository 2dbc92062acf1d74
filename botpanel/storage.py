"""In-memory storage for commands, event logs and bot statistics"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from botpanel.models import BotStat, BotStatInput, Command, CommandCreate, Log, LogCreate
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_COMMANDS = [
    CommandCreate(
        name="ping",
        description="Checks the bot's response time and health status.",
        usage="/ping",
        active=True,
    ),
    CommandCreate(
        name="help",
        description="Displays a list of available commands and their usage.",
        usage="/help [command]",
        active=True,
    ),
    CommandCreate(
        name="uptime",
        description="Shows how long the bot has been online without interruption.",
        usage="/uptime",
        active=True,
    ),
    CommandCreate(
        name="stats",
        description="Displays bot statistics including servers, users, and commands.",
        usage="/stats",
        active=True,
    ),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemStorage:
    """
    Authoritative in-memory state shared by the HTTP API and the chat client.

    State lives for the lifetime of the process only. Every operation takes the
    same re-entrant lock, so id assignment and log ordering stay consistent when
    the API thread pool and the event loop touch the store concurrently.
    Records handed out are copies; mutating them does not change the store.
    """

    def __init__(self, seed_defaults: bool = True):
        self._lock = threading.RLock()
        self._commands: Dict[int, Command] = {}
        self._logs: List[Log] = []
        self._bot_stats: Optional[BotStat] = None
        self._commands_id_counter = 1
        self._logs_id_counter = 1

        if seed_defaults:
            self._seed_defaults()

    def _seed_defaults(self):
        """Register the built-in commands and an initial statistics record"""
        for command in DEFAULT_COMMANDS:
            self.create_command(command)

        now = utcnow()
        self.replace_bot_stats(
            BotStatInput(
                uptime="0d 0h 0m",
                servers=0,
                commands=len(DEFAULT_COMMANDS),
                memory_usage="0 MB",
                api_latency=0,
                started_at=now,
                updated_at=now,
            )
        )
        logger.debug(f"Seeded {len(DEFAULT_COMMANDS)} default commands")

    # Commands

    def list_commands(self) -> List[Command]:
        with self._lock:
            return [command.model_copy() for command in self._commands.values()]

    def get_command(self, command_id: int) -> Optional[Command]:
        with self._lock:
            command = self._commands.get(command_id)
            return command.model_copy() if command is not None else None

    def get_command_by_name(self, name: str) -> Optional[Command]:
        """Return the first command whose name equals ``name`` exactly"""
        with self._lock:
            for command in self._commands.values():
                if command.name == name:
                    return command.model_copy()
            return None

    def create_command(self, command: CommandCreate) -> Command:
        with self._lock:
            command_id = self._commands_id_counter
            self._commands_id_counter += 1

            new_command = Command(id=command_id, created_at=utcnow(), **command.model_dump())
            self._commands[command_id] = new_command
            return new_command.model_copy()

    def update_command(self, command_id: int, changes: Dict[str, Any]) -> Optional[Command]:
        """Merge ``changes`` onto an existing command; only known fields apply, id and created_at never change"""
        with self._lock:
            existing = self._commands.get(command_id)
            if existing is None:
                return None

            allowed = {
                key: value
                for key, value in changes.items()
                if key in Command.model_fields and key not in ("id", "created_at")
            }
            updated = existing.model_copy(update=allowed)
            self._commands[command_id] = updated
            return updated.model_copy()

    def delete_command(self, command_id: int) -> bool:
        with self._lock:
            return self._commands.pop(command_id, None) is not None

    # Logs

    def list_logs(self, limit: Optional[int] = None) -> List[Log]:
        """Return logs newest first, truncated to ``limit`` entries when given"""
        with self._lock:
            sorted_logs = sorted(
                self._logs,
                key=lambda entry: (entry.timestamp, entry.id),
                reverse=True,
            )

        if limit is not None:
            return sorted_logs[:limit]
        return sorted_logs

    def create_log(self, log: LogCreate) -> Log:
        with self._lock:
            log_id = self._logs_id_counter
            self._logs_id_counter += 1

            new_log = Log(id=log_id, timestamp=utcnow(), **log.model_dump())
            self._logs.append(new_log)
            return new_log

    # Bot stats

    def get_bot_stats(self) -> Optional[BotStat]:
        with self._lock:
            return self._bot_stats.model_copy() if self._bot_stats is not None else None

    def replace_bot_stats(self, stats: BotStatInput) -> BotStat:
        """Overwrite the statistics singleton with a complete record"""
        with self._lock:
            data = stats.model_dump()
            data.pop("id", None)
            self._bot_stats = BotStat(**data)
            return self._bot_stats.model_copy()
