"""Capability set the dashboard needs from the chat platform client"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChatClient(Protocol):
    """Liveness and metrics exposed by the chat platform client"""

    def is_ready(self) -> bool:
        """Whether the client is connected and handling events"""
        ...

    def guild_count(self) -> int:
        """Number of servers (groups/channels) the bot is a member of"""
        ...

    def latency_ms(self) -> int:
        """Last measured round trip to the platform API, in milliseconds"""
        ...
