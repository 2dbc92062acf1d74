"""Command simulator: answers slash commands from the dashboard without the chat platform"""

import random
from dataclasses import dataclass
from typing import List, Optional

from botpanel.models import BotStat, Command, LogCreate
from botpanel.models.log import EVENT_TEST
from botpanel.storage import MemStorage
from botpanel.utils.logger import get_logger, truncate_for_log

logger = get_logger(__name__)

# Simulated ping latency is drawn from [SIMULATED_LATENCY_MIN, SIMULATED_LATENCY_MAX)
SIMULATED_LATENCY_MIN = 20
SIMULATED_LATENCY_MAX = 70


def parse_command_token(text: str) -> str:
    """Strip one leading slash and return everything up to the first space"""
    if text.startswith("/"):
        text = text[1:]
    return text.split(" ")[0]


def render_help(commands: List[Command]) -> str:
    lines = [f"/{command.name} - {command.description}" for command in commands if command.active]
    return "Available commands:\n" + "\n".join(lines)


def render_uptime(stats: Optional[BotStat]) -> str:
    uptime = (stats.uptime if stats else None) or "unknown"
    return f"Bot has been online for {uptime}"


def render_stats(stats: Optional[BotStat]) -> str:
    servers = (stats.servers if stats else None) or 0
    commands = (stats.commands if stats else None) or 0
    memory_usage = (stats.memory_usage if stats else None) or "0 MB"
    api_latency = (stats.api_latency if stats else None) or 0
    return (
        "Bot Stats:\n"
        f"Servers: {servers}\n"
        f"Commands: {commands}\n"
        f"Memory Usage: {memory_usage}\n"
        f"API Latency: {api_latency}ms"
    )


def render_ping(latency_ms: int, api_latency_ms: int) -> str:
    """Reply for a real /ping, with measured latencies"""
    return f"Pong! 🏓\nBot latency: {latency_ms}ms\nAPI latency: {api_latency_ms}ms"


def render_simulated_ping(rng: random.Random) -> str:
    latency = rng.randrange(SIMULATED_LATENCY_MIN, SIMULATED_LATENCY_MAX)
    return f"Pong! 🏓 Bot latency: {latency}ms\nBot is online and functioning properly!"


def render_fallback(text: str) -> str:
    return f"Executed command: {text}"


@dataclass
class SimulationResult:
    """Outcome of a simulated command; ``found`` is False for unknown commands"""

    found: bool
    token: str
    message: str
    response: str


class CommandSimulator:
    """Resolves command text against the store and produces the canned reply"""

    def __init__(self, storage: MemStorage, rng: Optional[random.Random] = None):
        self.storage = storage
        self.rng = rng or random.Random()

    def simulate(self, text: str) -> SimulationResult:
        token = parse_command_token(text)

        command = self.storage.get_command_by_name(token)
        if command is None:
            logger.debug(f"Simulated command not found: {truncate_for_log(token)}")
            return SimulationResult(
                found=False,
                token=token,
                message=f"Command '{token}' not found",
                response=f"Unknown command: {token}",
            )

        response = self._respond(token, text)

        self.storage.create_log(
            LogCreate(
                event_type=EVENT_TEST,
                server="Dashboard",
                user="User",
                details=f"Tested command: {text}",
            )
        )

        return SimulationResult(found=True, token=token, message="Command executed", response=response)

    def _respond(self, token: str, text: str) -> str:
        if token == "ping":
            return render_simulated_ping(self.rng)
        if token == "help":
            return render_help(self.storage.list_commands())
        if token == "uptime":
            return render_uptime(self.storage.get_bot_stats())
        if token == "stats":
            return render_stats(self.storage.get_bot_stats())
        return render_fallback(text)
