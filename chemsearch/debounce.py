"""
Trailing-edge debouncer.

Collapses a burst of rapid updates into a single settled value, published
once the input has been quiet for the configured delay.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Publishes the last pushed value after ``delay`` seconds without a push.

    ``on_settle`` runs only when the settled value differs from the previous
    one. Restarting the timer cancels the pending sleep, never work that an
    earlier ``on_settle`` already started.
    """

    def __init__(self, delay: float, on_settle: Callable[[T], None], initial: T):
        """
        Args:
            delay: Quiescence window in seconds
            on_settle: Called with the new settled value
            initial: Settled value before the first push
        """
        self.delay = delay
        self._on_settle = on_settle
        self._value: T = initial
        self._timer: Optional[asyncio.Task] = None

    @property
    def value(self) -> T:
        return self._value

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: T) -> None:
        """Restart the quiescence window with ``value`` as the candidate.

        Outside a running event loop there is no timer to restart: the value
        settles at once and ``on_settle`` is not called.
        """

        if self._timer:
            self._timer.cancel()
            self._timer = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._value = value
            return
        self._timer = loop.create_task(self._settle_after_delay(value))

    def cancel(self) -> None:
        if self._timer:
            self._timer.cancel()
            self._timer = None

    async def _settle_after_delay(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        if value == self._value:
            return
        self._value = value
        logger.debug("Debounced value settled: %r", value)
        self._on_settle(value)
