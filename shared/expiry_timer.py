"""One-shot cancellable timers driven by the running asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ExpiryCallback = Callable[[], None]


class ExpiryTimer:
    """Invoke ``on_expire`` once after ``delay`` seconds unless cancelled.

    The timer lives in a task on the running loop.  ``cancel`` is safe to call
    any number of times, including after the timer already fired.
    """

    def __init__(self, delay: float, on_expire: ExpiryCallback) -> None:
        self.delay = max(delay, 0.0)
        self.on_expire = on_expire
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self.fired = False
        self.cancelled = False
        self._start_timer_task()

    def _start_timer_task(self) -> None:
        if self._task is None:
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._run_timer())

    async def _run_timer(self) -> None:
        try:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.delay)
                return
            except asyncio.TimeoutError:
                pass
            if self.cancelled:
                return
            self.fired = True
            try:
                self.on_expire()
            except Exception:  # pragma: no cover - log unexpected errors
                logger.exception("Error in expiry callback")
        except asyncio.CancelledError:
            pass

    def cancel(self) -> None:
        """Stop the timer without firing the callback."""

        if self.fired or self.cancelled:
            return
        self.cancelled = True
        self._stop_event.set()

    def is_active(self) -> bool:
        return not (self.fired or self.cancelled)


def schedule_expiry(delay: float, on_expire: ExpiryCallback) -> Optional[ExpiryTimer]:
    """Start an :class:`ExpiryTimer` if an event loop is running.

    Returns ``None`` outside of a loop; callers then rely on polling.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return None
    return ExpiryTimer(delay, on_expire)


__all__ = ["ExpiryTimer", "schedule_expiry"]
