"""Unit tests for background jobs and the statistics service"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from botpanel.config import Settings
from botpanel.jobs.keep_alive import keep_alive_job
from botpanel.jobs.stats_refresh import stats_refresh_job
from botpanel.scheduler import KEEP_ALIVE_JOB, STATS_REFRESH_JOB, SchedulerService
from botpanel.services.stats_service import StatsService, format_uptime


def make_session(status=200):
    response = MagicMock(status=status)
    request_ctx = MagicMock()
    request_ctx.__aenter__.return_value = response
    session = MagicMock()
    session.get.return_value = request_ctx
    session_ctx = MagicMock()
    session_ctx.__aenter__.return_value = session
    return session_ctx, session


class TestFormatUptime:
    def test_zero(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_uptime(now, now) == "0d 0h 0m"

    def test_days_hours_minutes(self):
        started = datetime(2024, 1, 1, tzinfo=timezone.utc)
        now = started + timedelta(days=2, hours=3, minutes=4, seconds=59)
        assert format_uptime(started, now) == "2d 3h 4m"

    def test_clock_skew_clamps_to_zero(self):
        started = datetime(2024, 1, 2, tzinfo=timezone.utc)
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_uptime(started, now) == "0d 0h 0m"


class TestStatsService:
    @patch("botpanel.services.stats_service.memory_usage", return_value="64 MB")
    def test_refresh_keeps_started_at(self, _memory, storage, chat_client):
        service = StatsService(storage)
        started_at = storage.get_bot_stats().started_at

        chat_client.guilds = 5
        chat_client.latency = 12
        stats = service.refresh(chat_client)

        assert stats.started_at == started_at
        assert stats.servers == 5
        assert stats.api_latency == 12
        assert stats.commands == 4
        assert stats.memory_usage == "64 MB"

    @patch("botpanel.services.stats_service.memory_usage", return_value="64 MB")
    def test_reset_starts_new_period(self, _memory, storage, chat_client):
        service = StatsService(storage)
        later = storage.get_bot_stats().started_at + timedelta(hours=1)

        with patch("botpanel.services.stats_service.utcnow", return_value=later):
            stats = service.reset(chat_client)

        assert stats.started_at == later
        assert stats.uptime == "0d 0h 0m"


class TestKeepAliveJob:
    @pytest.mark.asyncio
    async def test_pings_url(self):
        session_ctx, session = make_session()
        with patch("botpanel.jobs.keep_alive.aiohttp.ClientSession", return_value=session_ctx):
            await keep_alive_job("http://localhost:5000/api/status", timeout=5)

        session.get.assert_called_once_with("http://localhost:5000/api/status")

    @pytest.mark.asyncio
    async def test_network_error_is_swallowed(self):
        with patch(
            "botpanel.jobs.keep_alive.aiohttp.ClientSession",
            side_effect=OSError("connection refused"),
        ):
            await keep_alive_job("http://localhost:5000/api/status")

    @pytest.mark.asyncio
    async def test_checks_chat_client(self, chat_client):
        session_ctx, _ = make_session()
        chat_client.ready = False
        get_chat_client = MagicMock(return_value=chat_client)

        with patch("botpanel.jobs.keep_alive.aiohttp.ClientSession", return_value=session_ctx):
            await keep_alive_job("http://localhost:5000/api/status", get_chat_client=get_chat_client)

        get_chat_client.assert_called_once()


class TestStatsRefreshJob:
    @pytest.mark.asyncio
    async def test_skips_without_chat_client(self):
        stats_service = MagicMock()

        await stats_refresh_job(stats_service, lambda: None)

        stats_service.refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_measures_latency_then_refreshes(self, chat_client):
        chat_client.measure_latency = AsyncMock()
        stats_service = MagicMock()

        await stats_refresh_job(stats_service, lambda: chat_client)

        chat_client.measure_latency.assert_awaited_once()
        stats_service.refresh.assert_called_once_with(chat_client)

    @pytest.mark.asyncio
    async def test_refresh_failure_is_logged(self, chat_client):
        stats_service = MagicMock()
        stats_service.refresh.side_effect = RuntimeError("boom")

        await stats_refresh_job(stats_service, lambda: chat_client)


class TestSchedulerService:
    def make_settings(self, **overrides):
        return Settings(_env_file=None, **overrides)

    def test_add_job_requires_initialize(self):
        scheduler = SchedulerService(self.make_settings())

        with pytest.raises(RuntimeError):
            scheduler.add_interval_job(stats_refresh_job, minutes=1, job_id=STATS_REFRESH_JOB)

    def test_no_jobs_before_initialize(self):
        assert SchedulerService(self.make_settings()).job_ids() == []

    def test_maintenance_jobs_follow_settings(self):
        scheduler = SchedulerService(self.make_settings(keep_alive_enabled=False))
        scheduler.initialize()

        job_ids = scheduler.schedule_maintenance(MagicMock(), lambda: None)

        assert job_ids == [STATS_REFRESH_JOB]

    def test_both_maintenance_jobs(self):
        scheduler = SchedulerService(self.make_settings())
        scheduler.initialize()

        job_ids = scheduler.schedule_maintenance(MagicMock(), lambda: None)

        assert sorted(job_ids) == [KEEP_ALIVE_JOB, STATS_REFRESH_JOB]
        scheduler.remove_job(KEEP_ALIVE_JOB)
        assert scheduler.job_ids() == [STATS_REFRESH_JOB]
