"""REST API routers"""

from botpanel.api.commands import router as commands_router
from botpanel.api.logs import router as logs_router
from botpanel.api.status import router as status_router
from botpanel.api.test_command import router as test_command_router

__all__ = ["commands_router", "logs_router", "status_router", "test_command_router"]
