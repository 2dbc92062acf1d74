"""Unit tests for the fault supervisor"""

import asyncio
import sys
import threading
from unittest.mock import MagicMock

import pytest

from botpanel.supervisor import Supervisor


@pytest.fixture
def supervisor(empty_storage):
    supervisor = Supervisor(empty_storage)
    yield supervisor
    supervisor.uninstall()


class TestRecordFault:
    """Test fault recording"""

    def test_fault_written_to_event_log(self, supervisor, empty_storage):
        supervisor.record_fault(ValueError("bad state"))

        logs = empty_storage.list_logs()
        assert len(logs) == 1
        assert logs[0].event_type == "Error"
        assert logs[0].server == "-"
        assert logs[0].user == "-"
        assert logs[0].details == "Uncaught Exception: bad state"

    def test_keep_serving_stays_healthy(self, supervisor):
        supervisor.record_fault(RuntimeError("boom"))

        assert supervisor.healthy is True
        assert supervisor.fault_count == 1

    def test_fault_marks_unhealthy_when_configured(self, empty_storage):
        supervisor = Supervisor(empty_storage, keep_serving=False)

        supervisor.record_fault(RuntimeError("boom"))

        assert supervisor.healthy is False

    def test_failure_to_log_is_swallowed(self):
        storage = MagicMock()
        storage.create_log.side_effect = RuntimeError("store down")
        supervisor = Supervisor(storage)

        supervisor.record_fault(RuntimeError("boom"))

        assert supervisor.fault_count == 1


class TestInstall:
    """Test process-wide hooks"""

    def test_install_replaces_and_restores_hooks(self, supervisor):
        original_hook = sys.excepthook
        original_threading_hook = threading.excepthook

        supervisor.install()
        assert sys.excepthook != original_hook
        assert threading.excepthook != original_threading_hook

        supervisor.uninstall()
        assert sys.excepthook == original_hook
        assert threading.excepthook == original_threading_hook

    def test_thread_fault_is_recorded(self, supervisor, empty_storage):
        supervisor.install()

        def explode():
            raise RuntimeError("thread failure")

        thread = threading.Thread(target=explode)
        thread.start()
        thread.join()

        assert empty_storage.list_logs()[0].details == "Uncaught Exception: thread failure"

    def test_sys_excepthook_records_fault(self, supervisor, empty_storage):
        supervisor.install()

        try:
            raise KeyError("missing")
        except KeyError:
            sys.excepthook(*sys.exc_info())

        assert empty_storage.list_logs()[0].event_type == "Error"

    @pytest.mark.asyncio
    async def test_unhandled_task_error_is_recorded(self, supervisor, empty_storage):
        loop = asyncio.get_running_loop()
        previous_handler = loop.get_exception_handler()
        supervisor.install(loop)

        try:
            loop.call_exception_handler({"message": "Task exception was never retrieved", "exception": ValueError("lost")})
        finally:
            loop.set_exception_handler(previous_handler)

        assert empty_storage.list_logs()[0].details == "Unhandled Rejection: lost"

    @pytest.mark.asyncio
    async def test_uninstall_clears_loop_handler(self, supervisor):
        loop = asyncio.get_running_loop()
        previous_handler = loop.get_exception_handler()

        try:
            supervisor.install(loop)
            assert loop.get_exception_handler() == supervisor._loop_exception_handler

            supervisor.uninstall()
            assert loop.get_exception_handler() is None
        finally:
            loop.set_exception_handler(previous_handler)
