from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

from .storage import ARTIFACT_SUFFIX

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class RetentionSweeper:
    """Deletes stored documents older than ``max_age_seconds``.

    Only finished ``.pdf`` files are considered; in-flight writes live under a
    temporary suffix until they are complete.
    """

    def __init__(
        self,
        directory: Path,
        *,
        max_age_seconds: float,
        interval_seconds: float,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.directory = Path(directory)
        self.max_age_seconds = max_age_seconds
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    def sweep(self) -> list[str]:
        now = self._clock()
        deleted: list[str] = []
        if not self.directory.is_dir():
            return deleted
        try:
            candidates = sorted(self.directory.glob(f"*{ARTIFACT_SUFFIX}"))
        except OSError as exc:
            logger.warning("Error reading content directory %s: %s", self.directory, exc)
            return deleted
        for path in candidates:
            try:
                age = now - path.stat().st_mtime
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Error getting stats for file %s: %s", path.name, exc)
                continue
            if age <= self.max_age_seconds:
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Error deleting file %s: %s", path.name, exc)
                continue
            logger.info("Deleted old file: %s", path.name, extra={"artifact": path.name})
            deleted.append(path.name)
        return deleted

    async def run(self, *, iterations: int | None = None) -> None:
        """Sleep one interval, then sweep; repeat ``iterations`` times or forever."""

        completed = 0
        while iterations is None or completed < iterations:
            await self._sleep(self.interval_seconds)
            self.sweep()
            completed += 1

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="retention-sweeper")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
