"""
Scheduler — Tests

Job bodies are called directly; job registration is checked on a live loop.
"""
import asyncio

import httpx

from keepalive.config import Settings
from keepalive.services.scheduler import MISFIRE_GRACE_SECONDS, SchedulerService
from keepalive.services.stats_log import Severity

from .helpers import ScriptedTarget, client_factory_for, refused

SELF_CHECK_URL = "http://localhost:3000/health"


def make_scheduler(stats, make_pinger, target, self_check_handler=None):
    config = Settings(port=3000, self_check_timeout_seconds=5)
    handler = self_check_handler or (lambda request: httpx.Response(200, json={"status": "healthy"}))
    return SchedulerService(
        stats,
        make_pinger(target),
        config,
        self_check_url=SELF_CHECK_URL,
        client_factory=client_factory_for(handler),
    )


class TestPingJobs:
    def test_keepalive_ping(self, stats, clock, make_pinger):
        target = ScriptedTarget(clock, [200])
        service = make_scheduler(stats, make_pinger, target)
        asyncio.run(service.keepalive_ping())

        logs = stats.snapshot().recent_logs
        assert logs[1].message == "Scheduled ping initiated."
        assert logs[1].severity == Severity.INFO
        assert logs[0].severity == Severity.SUCCESS
        assert stats.snapshot().total_pings == 1

    def test_anti_cold_start_ping(self, stats, clock, make_pinger):
        target = ScriptedTarget(clock, [503])
        service = make_scheduler(stats, make_pinger, target)
        asyncio.run(service.anti_cold_start_ping())

        logs = stats.snapshot().recent_logs
        assert logs[1].message == "Anti-cold-start ping initiated."
        assert logs[0].severity == Severity.ERROR
        assert stats.snapshot().failed_pings == 1

    def test_overlapping_jobs(self, stats, clock, make_pinger):
        target = ScriptedTarget(clock, [200])
        service = make_scheduler(stats, make_pinger, target)

        async def overlap():
            await asyncio.gather(service.keepalive_ping(), service.anti_cold_start_ping())

        asyncio.run(overlap())
        snap = stats.snapshot()
        assert snap.total_pings == 2
        assert snap.successful_pings == 2
        assert len(snap.recent_logs) == 4


class TestSelfCheck:
    def test_success(self, stats, clock, make_pinger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"status": "healthy"})

        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]), handler)
        asyncio.run(service.self_check())

        assert str(seen[0].url) == SELF_CHECK_URL
        assert seen[0].extensions["timeout"]["read"] == 5
        entry = stats.snapshot().recent_logs[0]
        assert entry.message == "Self-ping successful."
        assert entry.severity == Severity.INFO

    def test_failure_is_warning(self, stats, clock, make_pinger):
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]), refused)
        asyncio.run(service.self_check())

        entry = stats.snapshot().recent_logs[0]
        assert entry.message == "Self-ping failed: Connection refused"
        assert entry.severity == Severity.WARNING

    def test_error_status_is_warning(self, stats, clock, make_pinger):
        handler = lambda request: httpx.Response(500)
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]), handler)
        asyncio.run(service.self_check())

        entry = stats.snapshot().recent_logs[0]
        assert entry.message.startswith("Self-ping failed: ")
        assert entry.severity == Severity.WARNING

    def test_does_not_touch_counters(self, stats, clock, make_pinger):
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]), refused)
        asyncio.run(service.self_check())
        assert stats.snapshot().total_pings == 0


class TestLifecycle:
    def test_registers_jobs(self, stats, clock, make_pinger):
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]))

        async def start_and_stop():
            service.start()
            service.start()
            job_ids = {job.id for job in service.scheduler.get_jobs()}
            running = service.running
            service.stop()
            return job_ids, running

        job_ids, running = asyncio.run(start_and_stop())
        assert job_ids == {"keepalive_ping", "anti_cold_start_ping", "self_check", "initial_ping"}
        assert running
        assert not service.running

    def test_stop_without_start(self, stats, clock, make_pinger):
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]))
        service.stop()
        assert not service.running

    def test_cron_jobs_tolerate_late_fire(self, stats, clock, make_pinger):
        service = make_scheduler(stats, make_pinger, ScriptedTarget(clock, [200]))

        async def grace_times():
            service.start()
            graces = {job.id: job.misfire_grace_time for job in service.scheduler.get_jobs()}
            service.stop()
            return graces

        graces = asyncio.run(grace_times())
        assert MISFIRE_GRACE_SECONDS == 60
        for job_id in ("keepalive_ping", "anti_cold_start_ping", "self_check"):
            assert graces[job_id] == MISFIRE_GRACE_SECONDS
