"""Pytest configuration and shared fixtures"""

import os
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from botpanel.main import create_app
from botpanel.storage import MemStorage


class FakeChatClient:
    """Stands in for the Telegram bot behind the ChatClient capability set"""

    def __init__(self, ready: bool = True, guilds: int = 3, latency: int = 42):
        self.ready = ready
        self.guilds = guilds
        self.latency = latency
        self.sync_calls = 0

    def is_ready(self) -> bool:
        return self.ready

    def guild_count(self) -> int:
        return self.guilds

    def latency_ms(self) -> int:
        return self.latency

    async def sync_commands(self):
        self.sync_calls += 1


@pytest.fixture(autouse=True)
def reset_env_vars() -> Generator[None, None, None]:
    """Reset environment variables before each test"""
    original_env = os.environ.copy()

    botpanel_vars: List[str] = [
        "BOT_TOKEN",
        "ENVIRONMENT",
        "LOG_LEVEL",
        "PORT",
        "SEED_DEFAULT_COMMANDS",
        "KEEP_ALIVE_URL",
        "KEEP_ALIVE_INTERVAL_MINUTES",
        "SUPERVISOR_KEEP_SERVING",
    ]

    for var in botpanel_vars:
        os.environ.pop(var, None)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def storage() -> MemStorage:
    """Store seeded with the default commands and statistics"""
    return MemStorage()


@pytest.fixture
def empty_storage() -> MemStorage:
    """Store with no commands, logs or statistics"""
    return MemStorage(seed_defaults=False)


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def client(storage, chat_client) -> TestClient:
    """API client with a ready chat client"""
    app = create_app(storage=storage, chat_client=chat_client, start_services=False)
    return TestClient(app)


@pytest.fixture
def offline_client(storage) -> TestClient:
    """API client whose chat client never initialized"""
    app = create_app(storage=storage, chat_client=None, start_services=False)
    return TestClient(app)
