"""
Named Recurring Alarms

Asyncio stand-in for a browser alarm API: an alarm has a name and a period,
and on every tick its callback is awaited with the alarm name.

    scheduler = AlarmScheduler()
    if scheduler.get("crypto-update") is None:
        scheduler.create("crypto-update", 60, on_alarm)

A callback that raises is logged and the alarm keeps ticking.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from core.logging import get_logger


AlarmCallback = Callable[[str], Awaitable[None]]


@dataclass
class Alarm:
    name: str
    period_seconds: float
    task: asyncio.Task


class AlarmScheduler:
    """Registry of named periodic tasks on the running event loop."""

    def __init__(self) -> None:
        self._alarms: Dict[str, Alarm] = {}
        self._logger = get_logger(__name__)

    def create(self, name: str, period_seconds: float, callback: AlarmCallback) -> Alarm:
        """
        Register a recurring alarm, replacing any existing alarm of that name.
        The first tick fires one period after creation.
        """
        if period_seconds <= 0:
            raise ValueError(f"Alarm period must be positive, got {period_seconds}")

        self._cancel(name)
        task = asyncio.create_task(self._run(name, period_seconds, callback), name=f"alarm:{name}")
        alarm = Alarm(name=name, period_seconds=period_seconds, task=task)
        self._alarms[name] = alarm
        self._logger.info(f"Alarm '{name}' created (every {period_seconds:g}s)")
        return alarm

    def get(self, name: str) -> Optional[Alarm]:
        return self._alarms.get(name)

    async def clear(self, name: str) -> bool:
        """Cancel one alarm. Returns False if it did not exist."""
        task = self._cancel(name)
        if task is None:
            return False
        with contextlib.suppress(asyncio.CancelledError):
            await task
        return True

    async def clear_all(self) -> None:
        for name in list(self._alarms):
            await self.clear(name)

    def _cancel(self, name: str) -> Optional[asyncio.Task]:
        alarm = self._alarms.pop(name, None)
        if alarm is None:
            return None
        alarm.task.cancel()
        return alarm.task

    async def _run(self, name: str, period_seconds: float, callback: AlarmCallback) -> None:
        while True:
            await asyncio.sleep(period_seconds)
            try:
                await callback(name)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._logger.error(f"Alarm '{name}' callback failed: {e}")
