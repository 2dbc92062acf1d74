"""Top-level fault boundary: records uncaught faults in the event log and keeps running"""

import asyncio
import sys
import threading
from typing import Any, Dict, Optional

from botpanel.models import LogCreate
from botpanel.models.log import EVENT_ERROR
from botpanel.storage import MemStorage
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)


class Supervisor:
    """
    Catches faults nothing else handled (sys, threads, event loop, bot handlers).

    Every fault is logged, appended to the event log as an ``Error`` entry and
    swallowed. With ``keep_serving`` disabled the first fault marks the process
    unhealthy, which the ``/health`` endpoint reports as 503.
    """

    def __init__(self, storage: MemStorage, keep_serving: bool = True):
        self.storage = storage
        self.keep_serving = keep_serving
        self.healthy = True
        self.fault_count = 0
        self._installed = False
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def record_fault(self, error: BaseException, origin: str = "Uncaught Exception") -> None:
        """Log a fault and write it to the event log; never raises"""
        self.fault_count += 1
        logger.error(
            f"{origin}: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )

        try:
            self.storage.create_log(
                LogCreate(
                    event_type=EVENT_ERROR,
                    server="-",
                    user="-",
                    details=f"{origin}: {error}",
                )
            )
            logger.info("Application recovered from uncaught exception")
        except Exception as log_error:
            logger.error(f"Failed to log {origin.lower()}: {log_error}")

        if not self.keep_serving and self.healthy:
            self.healthy = False
            logger.warning("Process marked unhealthy after uncaught fault")

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Hook into sys, threading and the running event loop"""
        if self._installed:
            return

        self._previous_excepthook = sys.excepthook
        self._previous_threading_excepthook = threading.excepthook
        sys.excepthook = self._sys_excepthook
        threading.excepthook = self._threading_excepthook

        if loop is not None:
            loop.set_exception_handler(self._loop_exception_handler)
            self._loop = loop

        self._installed = True
        logger.debug("Supervisor installed")

    def uninstall(self) -> None:
        if not self._installed:
            return
        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_excepthook
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(None)
        self._loop = None
        self._installed = False

    def _sys_excepthook(self, exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            self._previous_excepthook(exc_type, exc_value, exc_traceback)
            return
        self.record_fault(exc_value, "Uncaught Exception")

    def _threading_excepthook(self, args):
        if args.exc_value is None:
            return
        self.record_fault(args.exc_value, "Uncaught Exception")

    def _loop_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]):
        error = context.get("exception")
        if error is None:
            error = RuntimeError(context.get("message", "unknown event loop error"))
        self.record_fault(error, "Unhandled Rejection")
