"""Models module"""

from botpanel.models.bot_stat import BotStat, BotStatInput
from botpanel.models.command import Command, CommandCreate, CommandUpdate
from botpanel.models.log import Log, LogCreate

__all__ = [
    "BotStat",
    "BotStatInput",
    "Command",
    "CommandCreate",
    "CommandUpdate",
    "Log",
    "LogCreate",
]
