"""
BotPanel Custom Exceptions

Each error carries the HTTP status it maps to and the client-facing message.
"""

from typing import Any, List, Optional


class BotPanelError(Exception):
    """Base exception for all BotPanel errors"""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        return body


class ValidationError(BotPanelError):
    """Malformed or missing input"""

    status_code = 400


class NotFoundError(BotPanelError):
    """Valid reference, but no such record"""

    status_code = 404


class ServiceUnavailableError(BotPanelError):
    """Chat client not initialized or statistics missing"""

    status_code = 503


class InternalError(BotPanelError):
    """Unexpected fault; details stay in the server log"""

    status_code = 500
