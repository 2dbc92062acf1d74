"""
BotPanel FastAPI Dependencies

Everything handlers need is attached to ``app.state`` by ``create_app``.
"""

from typing import Optional

from fastapi import Request

from botpanel.services.chat_client import ChatClient
from botpanel.services.command_simulator import CommandSimulator
from botpanel.services.stats_service import StatsService
from botpanel.storage import MemStorage
from botpanel.supervisor import Supervisor


def get_storage(request: Request) -> MemStorage:
    return request.app.state.storage


def get_chat_client(request: Request) -> Optional[ChatClient]:
    """The chat client, or None while it has never initialized"""
    return request.app.state.chat_client


def get_simulator(request: Request) -> CommandSimulator:
    return request.app.state.simulator


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service


def get_supervisor(request: Request) -> Supervisor:
    return request.app.state.supervisor
