"""Named job registry running periodic or one-shot coroutines on asyncio."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Optional, Union

from ..core.errors import JobRegistryError
from ..core.logger import get_logger

logger = get_logger(__name__)

OnTick = Callable[[], Awaitable[None]]
Schedule = Union[float, int, timedelta, datetime]


class ScheduledJob:
    """A coroutine fired on an interval, or once at a given time.

    Ticks never overlap: the next wait starts after the previous tick returns.
    A failing tick is logged and the job keeps running.
    """

    def __init__(self, name: str, schedule: Schedule, on_tick: OnTick) -> None:
        if isinstance(schedule, timedelta):
            schedule = schedule.total_seconds()
        if isinstance(schedule, (int, float)) and schedule <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.schedule = schedule
        self.on_tick = on_tick
        self.ticks = 0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _delay(self) -> float:
        if isinstance(self.schedule, datetime):
            target = self.schedule
            now = datetime.now(target.tzinfo)
            return max((target - now).total_seconds(), 0.0)
        return float(self.schedule)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._delay())
            try:
                await self.on_tick()
            except Exception:  # noqa: BLE001 - a tick failure must not kill the job
                logger.exception("Job %s tick failed", self.name)
            self.ticks += 1
            if isinstance(self.schedule, datetime):
                return

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"job:{self.name}")
        logger.info("Job %s started", self.name)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Job %s stopped after %s ticks", self.name, self.ticks)


class JobManager:
    """Keyed registry of scheduled jobs."""

    def __init__(self) -> None:
        self._jobs: Dict[str, ScheduledJob] = {}

    def create_job(self, name: str, schedule: Schedule, on_tick: OnTick) -> ScheduledJob:
        if name in self._jobs:
            raise JobRegistryError(f"job name {name!r} is duplicated")
        job = ScheduledJob(name, schedule, on_tick)
        self._jobs[name] = job
        return job

    def get(self, name: str) -> ScheduledJob:
        job = self._jobs.get(name)
        if job is None:
            raise JobRegistryError(f"job {name!r} not found")
        return job

    def names(self) -> list[str]:
        return list(self._jobs)

    async def start_job(self, name: str) -> None:
        await self.get(name).start()

    async def stop_job(self, name: str) -> None:
        await self.get(name).stop()

    async def stop_all(self) -> None:
        for job in self._jobs.values():
            await job.stop()
